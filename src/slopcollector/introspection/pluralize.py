"""English plural guesses for FK target table names.

Best-effort string matching: `category` -> `categories`,
`batch` -> `batches`, `person` -> `people`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

# (singular suffix, plural suffix), tried in this order after "+s"
_SUFFIX_RULES: tuple[tuple[str, str], ...] = (
    ("y", "ies"),
    ("s", "ses"),
    ("ch", "ches"),
    ("sh", "shes"),
    ("x", "xes"),
    ("z", "zes"),
    ("f", "ves"),
    ("fe", "ves"),
    ("us", "i"),
    ("is", "es"),
    ("on", "a"),
)

_IRREGULAR: tuple[tuple[str, str], ...] = (
    ("man", "men"),
    ("person", "people"),
    ("child", "children"),
)


def plural_variants(base: str) -> list[str]:
    """Candidate table names for a singular base name, in match order.

    Order: plain, +s, y->ies, s->ses, ch->ches, sh->shes, x->xes, z->zes,
    f->ves, fe->ves, us->i, is->es, on->a, +es, then the irregular
    man/person/child plurals. Duplicates are dropped, first position kept.
    """
    variants = [base, f"{base}s"]

    lowered = base.lower()
    for singular, plural in _SUFFIX_RULES:
        if lowered.endswith(singular):
            variants.append(base[: len(base) - len(singular)] + plural)

    variants.append(f"{base}es")

    for singular, plural in _IRREGULAR:
        if lowered.endswith(singular):
            variants.append(base[: len(base) - len(singular)] + plural)

    seen: set[str] = set()
    unique: list[str] = []
    for variant in variants:
        if variant and variant not in seen:
            seen.add(variant)
            unique.append(variant)
    return unique


def name_lookup(table_names: Iterable[str]) -> dict[str, str]:
    """Lowercased table name to its actual spelling; the first spelling wins."""
    lookup: dict[str, str] = {}
    for name in table_names:
        lookup.setdefault(name.lower(), name)
    return lookup


def match_table(base: str, lookup: Mapping[str, str]) -> str | None:
    """Value for the first plural variant of `base` found in `lookup`.

    `lookup` is keyed by lowercased name, as built by name_lookup().

    >>> match_table("category", name_lookup(["users", "Categories"]))
    'Categories'
    """
    for variant in plural_variants(base):
        found = lookup.get(variant.lower())
        if found is not None:
            return found
    return None
