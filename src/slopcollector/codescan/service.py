"""Code scans: match application code against the latest snapshot's tables."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from slopcollector.codescan.extractor import PatternExtractor, aggregate_patterns, index_candidates
from slopcollector.codescan.models import (
    CodeScanResult,
    ExtractedPattern,
    PatternSummary,
    SourceFile,
)
from slopcollector.core.exceptions import PersistenceError
from slopcollector.core.logging import get_logger, log_context
from slopcollector.core.models import JobStatus
from slopcollector.snapshots.assembler import snapshot_from_row
from slopcollector.snapshots.service import SnapshotService
from slopcollector.storage.models import AnalysisJob, CodePattern

logger = get_logger(__name__)

CODE_SCAN_JOB_TYPE = "code_scan"


def summarize(patterns: Sequence[ExtractedPattern]) -> PatternSummary:
    def count(pattern_type: str) -> int:
        return sum(1 for p in patterns if p.pattern_type == pattern_type)

    return PatternSummary(
        total_patterns=len(patterns),
        filter_count=count("filter"),
        join_count=count("join"),
        sort_count=count("sort"),
    )


class CodeScanService:
    """Scans code for a project and replaces its stored code patterns.

    Args:
        session: Database session (committed by the caller's scope)
    """

    def __init__(self, session: Session):
        self.session = session
        self.snapshots = SnapshotService(session)

    def scan_project(
        self, project_id: str, files: Sequence[SourceFile], source: str
    ) -> CodeScanResult:
        """Extract patterns for the latest snapshot's tables and store them.

        The project's previous patterns are replaced, even when the scan
        finds none.

        Raises:
            ProjectNotFoundError: Unknown project
            SnapshotNotFoundError: The project was never synced
            PersistenceError: Replacing the stored patterns failed
        """
        self.snapshots.get_project(project_id)
        snapshot = snapshot_from_row(self.snapshots.get_latest_row(project_id))

        extractor = PatternExtractor(t.table_name for t in snapshot.tables)
        patterns = aggregate_patterns(
            pattern for f in files for pattern in extractor.extract(f.content, f.path)
        )

        job = AnalysisJob(
            project_id=project_id, job_type=CODE_SCAN_JOB_TYPE, status=JobStatus.RUNNING.value
        )
        self.session.add(job)
        self.session.flush()

        with log_context(project_id=project_id, job_id=job.job_id):
            try:
                with self.session.begin_nested():
                    self._replace_patterns(project_id, patterns)
            except SQLAlchemyError as e:
                job.status = JobStatus.FAILED.value
                job.error_message = str(e)
                job.completed_at = datetime.now(UTC)
                self.session.commit()
                logger.error("code_scan_failed", error=str(e))
                raise PersistenceError(f"Failed to store code patterns: {e}") from e

            result = CodeScanResult(
                project_id=project_id,
                job_id=job.job_id,
                source=source,
                files_scanned=len(files),
                patterns_found=len(patterns),
                tables_analyzed=sorted({p.table_name for p in patterns}),
                suggestions=index_candidates(patterns),
                summary=summarize(patterns),
            )
            job.status = JobStatus.COMPLETED.value
            job.completed_at = datetime.now(UTC)
            job.summary = {
                "source": source,
                "files_scanned": len(files),
                **result.summary.model_dump(),
            }
            self.session.flush()

            logger.info("code_scan_complete", files=len(files), patterns=len(patterns))
        return result

    def _replace_patterns(self, project_id: str, patterns: Sequence[ExtractedPattern]) -> None:
        self.session.execute(delete(CodePattern).where(CodePattern.project_id == project_id))
        self.session.add_all(
            CodePattern(
                project_id=project_id,
                table_name=p.table_name,
                column_name=p.column_name,
                pattern_type=p.pattern_type,
                file_path=p.file_path,
                line_number=p.line_number,
                code_snippet=p.code_snippet,
                frequency=p.frequency,
            )
            for p in patterns
        )
        self.session.flush()
