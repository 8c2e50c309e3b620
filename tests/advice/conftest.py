"""Fixtures for advice tests."""

import pytest

from slopcollector.advice.generator import AdviceGenerator
from slopcollector.advice.models import SuggestionDraft


@pytest.fixture
def generator(llm_config, fake_provider, prompt_renderer) -> AdviceGenerator:
    return AdviceGenerator(llm_config, fake_provider, prompt_renderer)


@pytest.fixture
def index_draft() -> SuggestionDraft:
    return SuggestionDraft(
        table_name="posts",
        column_name="category_id",
        suggestion_type="missing_index",
        title="Add index on posts.category_id",
        description="Foreign key without an index slows joins.",
        severity="critical",
        sql_snippet="CREATE INDEX idx_posts_category_id ON posts(category_id);",
    )
