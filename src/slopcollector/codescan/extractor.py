"""Find table and column usage in application source.

Two kinds of line are recognized for each known table:

- Supabase client calls: `.from('orders')` (`.from_()` and `.table()` in
  the Python client). Filters (`.eq`, `.gt`, `.filter`, ...), `.order`
  and the column list of `.select` on the same line become column
  patterns; a call with none of them is a table-wide "query" pattern.
- SQL: `FROM`, `JOIN`, `INTO`, `UPDATE` or `DELETE FROM` naming the
  table. `WHERE col =`, `ORDER BY col` and `JOIN x ON y.col` on the same
  line become column patterns; a statement without them records nothing.

Matching is per line. Queries split over several lines only count the
parts on the line that names the table.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from slopcollector.advice.models import PatternType
from slopcollector.codescan.models import ExtractedPattern

SNIPPET_LENGTH = 150

_COMMENT_PREFIXES = ("//", "/*", "*", "--", "#")

_CLIENT_COLUMNS: tuple[tuple[re.Pattern[str], PatternType], ...] = (
    (
        re.compile(
            r"\.(?:eq|neq|gte?|lte?|i?like|in_?|is_?|filter)\s*\(\s*['\"`](\w+)['\"`]",
            re.IGNORECASE,
        ),
        "filter",
    ),
    (re.compile(r"\.order\s*\(\s*['\"`](\w+)['\"`]", re.IGNORECASE), "sort"),
)
_CLIENT_SELECT = re.compile(r"\.select\s*\(\s*['\"`]([^'\"`]+)['\"`]", re.IGNORECASE)

_SQL_COLUMNS: tuple[tuple[re.Pattern[str], PatternType], ...] = (
    (re.compile(r"\bWHERE\s+(?:\w+\.)?(\w+)\s*[=<>!]", re.IGNORECASE), "filter"),
    (re.compile(r"\bORDER\s+BY\s+(?:\w+\.)?(\w+)", re.IGNORECASE), "sort"),
    (re.compile(r"\bJOIN\s+\w+\s+ON\s+\w+\.(\w+)", re.IGNORECASE), "join"),
)


def _client_call(table: str) -> re.Pattern[str]:
    name = re.escape(table)
    return re.compile(rf"\.(?:from_?|table)\s*\(\s*['\"`]{name}['\"`]\s*\)", re.IGNORECASE)


def _sql_statement(table: str) -> re.Pattern[str]:
    name = re.escape(table)
    return re.compile(
        rf"\b(?:FROM|JOIN|INTO|UPDATE|DELETE\s+FROM)\s+(?:\w+\.)?\"?{name}\"?(?!\w)",
        re.IGNORECASE,
    )


def _selected_columns(line: str) -> list[str]:
    """Plain column names from `.select('a, b, author.name')`; `*` and embeds are skipped."""
    columns = []
    for match in _CLIENT_SELECT.finditer(line):
        for part in match.group(1).split(","):
            name = part.strip().rsplit(".", 1)[-1]
            if name and name != "*" and "(" not in name:
                columns.append(name)
    return columns


def _client_columns(line: str) -> list[tuple[str | None, PatternType]]:
    found: list[tuple[str | None, PatternType]] = []
    for regex, pattern_type in _CLIENT_COLUMNS:
        found.extend((m.group(1), pattern_type) for m in regex.finditer(line))
    found.extend((name, "query") for name in _selected_columns(line))
    return found


def _sql_columns(line: str) -> list[tuple[str, PatternType]]:
    found: list[tuple[str, PatternType]] = []
    for regex, pattern_type in _SQL_COLUMNS:
        found.extend((m.group(1), pattern_type) for m in regex.finditer(line))
    return found


class PatternExtractor:
    """Compiled matchers for a fixed set of table names.

    Build one per scan and call `extract` for each file.
    """

    def __init__(self, table_names: Iterable[str]):
        self.table_names = sorted(set(table_names))
        self._matchers = [(t, _client_call(t), _sql_statement(t)) for t in self.table_names]

    def extract(self, content: str, file_path: str) -> list[ExtractedPattern]:
        patterns: list[ExtractedPattern] = []
        for line_number, line in enumerate(content.splitlines(), start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith(_COMMENT_PREFIXES):
                continue

            for table, client_call, sql_statement in self._matchers:
                uses: list[tuple[str | None, PatternType]] = []
                if client_call.search(line):
                    uses.extend(_client_columns(line) or [(None, "query")])
                if sql_statement.search(line):
                    uses.extend(_sql_columns(line))

                patterns.extend(
                    ExtractedPattern(
                        table_name=table,
                        column_name=column,
                        pattern_type=pattern_type,
                        file_path=file_path,
                        line_number=line_number,
                        code_snippet=stripped[:SNIPPET_LENGTH],
                    )
                    for column, pattern_type in uses
                )
        return patterns


def aggregate_patterns(patterns: Iterable[ExtractedPattern]) -> list[ExtractedPattern]:
    """Merge repeats of (table, column, type, file); the first line is kept.

    >>> a = ExtractedPattern(table_name="t", pattern_type="query", file_path="a.ts", line_number=3)
    >>> b = a.model_copy(update={"line_number": 9})
    >>> [(p.line_number, p.frequency) for p in aggregate_patterns([a, b])]
    [(3, 2)]
    """
    merged: dict[tuple[str, str, str, str], ExtractedPattern] = {}
    for pattern in patterns:
        existing = merged.get(pattern.key)
        if existing is None:
            merged[pattern.key] = pattern.model_copy()
        else:
            existing.frequency += pattern.frequency
    return list(merged.values())


def index_candidates(patterns: Sequence[ExtractedPattern], limit: int = 5) -> list[str]:
    """Most-filtered columns, as "Consider indexing ..." hints."""
    counts: dict[str, int] = {}
    for pattern in patterns:
        if pattern.pattern_type == "filter" and pattern.column_name:
            key = f"{pattern.table_name}.{pattern.column_name}"
            counts[key] = counts.get(key, 0) + pattern.frequency

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    return [f"Consider indexing {column} (used in WHERE {n}x)" for column, n in ranked]
