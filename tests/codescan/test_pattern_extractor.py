"""Tests for code pattern extraction and aggregation."""

from slopcollector.codescan.extractor import (
    SNIPPET_LENGTH,
    PatternExtractor,
    aggregate_patterns,
    index_candidates,
)
from slopcollector.codescan.models import ExtractedPattern


def _uses(patterns: list[ExtractedPattern]) -> set[tuple[str, str | None, str]]:
    return {(p.table_name, p.column_name, p.pattern_type) for p in patterns}


class TestClientCalls:
    """Tests for Supabase client query lines."""

    def test_filters_order_and_selected_columns(self):
        extractor = PatternExtractor(["posts", "users"])
        line = (
            "const { data } = await supabase.from('posts')"
            ".select('id, title').eq('author_id', uid).order('created_at')"
        )

        patterns = extractor.extract(line, "src/posts.ts")

        assert _uses(patterns) == {
            ("posts", "author_id", "filter"),
            ("posts", "created_at", "sort"),
            ("posts", "id", "query"),
            ("posts", "title", "query"),
        }
        assert all(p.file_path == "src/posts.ts" and p.line_number == 1 for p in patterns)

    def test_call_without_columns_is_table_query(self):
        extractor = PatternExtractor(["users"])

        patterns = extractor.extract('await supabase.from("users").insert(row)', "a.js")

        assert _uses(patterns) == {("users", None, "query")}

    def test_star_and_embedded_selects_are_skipped(self):
        extractor = PatternExtractor(["posts"])

        line = "supabase.from('posts').select('*, author:users(name)')"

        patterns = extractor.extract(line, "a.ts")

        assert _uses(patterns) == {("posts", None, "query")}

    def test_python_client(self):
        extractor = PatternExtractor(["users"])
        line = 'supabase.table("users").select("email").eq("id", user_id).execute()'

        patterns = extractor.extract(line, "app/db.py")

        assert _uses(patterns) == {("users", "id", "filter"), ("users", "email", "query")}

    def test_range_and_text_filters(self):
        extractor = PatternExtractor(["orders"])
        line = "supabase.from('orders').gte('total', 10).ilike('note', '%gift%')"

        patterns = extractor.extract(line, "a.ts")

        assert _uses(patterns) == {("orders", "total", "filter"), ("orders", "note", "filter")}


class TestSqlStatements:
    """Tests for raw SQL lines."""

    def test_where_order_and_join_columns(self):
        extractor = PatternExtractor(["orders"])
        line = (
            "SELECT * FROM orders o JOIN users ON o.user_id = users.id "
            "WHERE status = 'paid' ORDER BY created_at"
        )

        patterns = extractor.extract(line, "db/report.sql")

        assert _uses(patterns) == {
            ("orders", "status", "filter"),
            ("orders", "created_at", "sort"),
            ("orders", "user_id", "join"),
        }

    def test_schema_qualified_table(self):
        extractor = PatternExtractor(["posts"])

        patterns = extractor.extract("SELECT id FROM public.posts WHERE author_id = $1", "q.sql")

        assert _uses(patterns) == {("posts", "author_id", "filter")}

    def test_statement_without_columns_records_nothing(self):
        extractor = PatternExtractor(["orders"])

        assert extractor.extract("INSERT INTO orders VALUES (1, 'paid')", "seed.sql") == []

    def test_longer_table_name_does_not_match(self):
        extractor = PatternExtractor(["posts"])

        assert extractor.extract("SELECT * FROM posts_archive WHERE id = 1", "q.sql") == []


class TestExtractLines:
    """Tests for line handling."""

    def test_comment_lines_are_skipped(self):
        extractor = PatternExtractor(["posts"])
        content = "\n".join(
            [
                "// supabase.from('posts').eq('id', 1)",
                "-- SELECT * FROM posts WHERE id = 1",
                "# supabase.table('posts').eq('id', 1)",
                " * supabase.from('posts')",
            ]
        )

        assert extractor.extract(content, "a.ts") == []

    def test_line_numbers_and_snippet(self):
        extractor = PatternExtractor(["posts"])
        content = "import x from 'y'\n\n    supabase.from('posts').select('*')  \n"

        (pattern,) = extractor.extract(content, "a.ts")

        assert pattern.line_number == 3
        assert pattern.code_snippet == "supabase.from('posts').select('*')"

    def test_snippet_is_truncated(self):
        extractor = PatternExtractor(["posts"])
        line = "supabase.from('posts').select('*') // " + "x" * 300

        (pattern,) = extractor.extract(line, "a.ts")

        assert len(pattern.code_snippet) == SNIPPET_LENGTH


class TestAggregation:
    """Tests for aggregate_patterns and index_candidates."""

    def _pattern(self, **overrides) -> ExtractedPattern:
        values = {
            "table_name": "posts",
            "column_name": "author_id",
            "pattern_type": "filter",
            "file_path": "a.ts",
            "line_number": 1,
        }
        values.update(overrides)
        return ExtractedPattern(**values)

    def test_repeats_in_one_file_are_counted(self):
        patterns = [
            self._pattern(line_number=4),
            self._pattern(line_number=9),
            self._pattern(file_path="b.ts", line_number=2),
        ]

        merged = aggregate_patterns(patterns)

        assert [(p.file_path, p.line_number, p.frequency) for p in merged] == [
            ("a.ts", 4, 2),
            ("b.ts", 2, 1),
        ]
        assert patterns[0].frequency == 1

    def test_table_query_and_column_query_stay_apart(self):
        merged = aggregate_patterns(
            [
                self._pattern(column_name=None, pattern_type="query"),
                self._pattern(column_name="id", pattern_type="query"),
            ]
        )

        assert len(merged) == 2

    def test_index_candidates_rank_filtered_columns(self):
        patterns = [
            self._pattern(frequency=3),
            self._pattern(file_path="b.ts"),
            self._pattern(table_name="users", column_name="email", frequency=2),
            self._pattern(column_name="created_at", pattern_type="sort", frequency=9),
        ]

        assert index_candidates(patterns) == [
            "Consider indexing posts.author_id (used in WHERE 4x)",
            "Consider indexing users.email (used in WHERE 2x)",
        ]
        assert index_candidates(patterns, limit=1) == [
            "Consider indexing posts.author_id (used in WHERE 4x)"
        ]
