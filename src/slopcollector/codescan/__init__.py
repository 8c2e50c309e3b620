"""Code scans: find where application code queries the schema.

Sources (local directory, uploads, GitHub) -> PatternExtractor ->
CodePattern rows, which advice prompts and suggestion cards read.
"""

from slopcollector.codescan.extractor import PatternExtractor, aggregate_patterns
from slopcollector.codescan.models import CodeScanResult, ExtractedPattern, SourceFile
from slopcollector.codescan.service import CodeScanService
from slopcollector.codescan.sources import (
    GitHubSource,
    from_uploads,
    parse_github_url,
    read_directory,
)

__all__ = [
    "CodeScanResult",
    "CodeScanService",
    "ExtractedPattern",
    "GitHubSource",
    "PatternExtractor",
    "SourceFile",
    "aggregate_patterns",
    "from_uploads",
    "parse_github_url",
    "read_directory",
]
