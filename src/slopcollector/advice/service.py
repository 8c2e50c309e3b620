"""Advice runs: cooldown, generation, storage and job bookkeeping."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from slopcollector.advice.generator import AdviceGenerator
from slopcollector.advice.models import AdviceRunResult
from slopcollector.advice.suggestions import (
    draft_from_advice,
    list_code_patterns,
    store_suggestions,
)
from slopcollector.core.config import get_settings
from slopcollector.core.exceptions import (
    AdviceCooldownError,
    AdviceGenerationError,
    PersistenceError,
    ProjectNotFoundError,
)
from slopcollector.core.logging import get_logger, log_context
from slopcollector.core.models import JobStatus
from slopcollector.snapshots.assembler import snapshot_from_row
from slopcollector.snapshots.service import SnapshotService
from slopcollector.storage.models import AnalysisJob, Project

logger = get_logger(__name__)

ADVICE_JOB_TYPE = "ai_advice"


class AdviceService:
    """Generates and stores advice for a project.

    Args:
        session: Database session
        generator: LLM advice generator
    """

    def __init__(self, session: Session, generator: AdviceGenerator):
        self.session = session
        self.generator = generator

    def last_completed_run(self, project_id: str, since: datetime) -> AnalysisJob | None:
        stmt = (
            select(AnalysisJob)
            .where(
                AnalysisJob.project_id == project_id,
                AnalysisJob.job_type == ADVICE_JOB_TYPE,
                AnalysisJob.status == JobStatus.COMPLETED.value,
                AnalysisJob.created_at >= since,
            )
            .order_by(AnalysisJob.created_at.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def check_cooldown(self, project_id: str, cooldown_hours: float) -> None:
        """Raise AdviceCooldownError if a completed run falls inside the window."""
        since = datetime.now(UTC) - timedelta(hours=cooldown_hours)
        recent = self.last_completed_run(project_id, since)
        if recent is not None:
            raise AdviceCooldownError(recent.created_at, cooldown_hours)

    def generate_for_project(
        self,
        project_id: str,
        cooldown_hours: float | None = None,
        skip_cooldown: bool = False,
        include_code_patterns: bool = True,
    ) -> AdviceRunResult:
        """Run advice generation for the project's latest snapshot.

        Raises:
            ProjectNotFoundError: Unknown project
            AdviceCooldownError: A run completed within the cooldown window
            SnapshotNotFoundError: The project was never synced
            AdviceGenerationError: The LLM call or its output failed
            PersistenceError: Storing suggestions failed
        """
        project = self.session.get(Project, project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        if cooldown_hours is None:
            cooldown_hours = get_settings().advice_cooldown_hours
        if not skip_cooldown:
            self.check_cooldown(project_id, cooldown_hours)

        snapshot_row = SnapshotService(self.session).get_latest_row(project_id)
        snapshot = snapshot_from_row(snapshot_row)
        patterns = list_code_patterns(self.session, project_id) if include_code_patterns else []

        job = AnalysisJob(
            project_id=project_id, job_type=ADVICE_JOB_TYPE, status=JobStatus.RUNNING.value
        )
        self.session.add(job)
        self.session.flush()

        with log_context(project_id=project_id, job_id=job.job_id):
            try:
                advice = self.generator.generate(snapshot, project.name, patterns or None)
                drafts = [draft_from_advice(item) for item in advice.advisories]
                # Savepoint: a failed write rolls back only the suggestions, not the job row
                with self.session.begin_nested():
                    stored = store_suggestions(
                        self.session, project_id, snapshot_row.snapshot_id, drafts, snapshot
                    )
            except (AdviceGenerationError, PersistenceError) as e:
                job.status = JobStatus.FAILED.value
                job.error_message = str(e)
                job.completed_at = datetime.now(UTC)
                # The failure record must survive the caller's rollback
                self.session.commit()
                logger.error("advice_run_failed", error=str(e))
                raise

            job.status = JobStatus.COMPLETED.value
            job.completed_at = datetime.now(UTC)
            job.summary = {
                "summary": advice.summary,
                "advisories": len(advice.advisories),
                **stored.model_dump(),
            }
            self.session.flush()

            logger.info("advice_run_complete", advisories=len(advice.advisories))

        return AdviceRunResult(
            project_id=project_id,
            snapshot_id=snapshot_row.snapshot_id,
            job_id=job.job_id,
            summary=advice.summary,
            stored=stored,
            stats=advice.stats,
        )
