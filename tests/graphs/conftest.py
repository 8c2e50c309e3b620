"""Fixtures for diagram tests."""

import pytest

from slopcollector.advice.models import Suggestion
from slopcollector.graphs.models import DiagramColumn, DiagramTable


def _make_table(table_id: str, *columns: DiagramColumn) -> DiagramTable:
    return DiagramTable(id=table_id, name=table_id, columns=list(columns))


@pytest.fixture
def make_table():
    """Build a DiagramTable whose id and name are both `table_id`."""
    return _make_table


@pytest.fixture
def users_posts():
    """users{id} and posts{id, user_id -> users.id}, factory over user_id indexing."""

    def build(indexed: bool = True) -> list[DiagramTable]:
        users = _make_table("users", DiagramColumn(name="id", type="uuid", primary_key=True))
        posts = _make_table(
            "posts",
            DiagramColumn(name="id", type="bigint", primary_key=True),
            DiagramColumn(name="user_id", type="uuid", foreign_key="users.id", indexed=indexed),
        )
        return [users, posts]

    return build


@pytest.fixture
def posts_suggestion() -> Suggestion:
    return Suggestion(
        id="s-1",
        table_id="posts",
        table_name="posts",
        column_name="user_id",
        severity="error",
        type="not-indexed",
        title="Add index on posts.user_id",
        description="Foreign key without an index",
    )
