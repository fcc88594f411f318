# app/services/job_store.py
import logging
from abc import ABC, abstractmethod
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.checklist_template import generate_checklist
from app.errors import DuplicateJobNumber, InvariantViolation, JobNotFound, StoreUnavailable
from app.models.job_model import JobRecord
from app.schemas.job import Job, JobStatus
from app.utils import utc_now

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "System"


class JobStore(ABC):
    """Persistence boundary for jobs. Writes are whole-row and last-write-wins."""

    @abstractmethod
    def list_jobs(self) -> List[Job]:
        """All jobs, most recently updated first."""

    @abstractmethod
    def get_job(self, job_id: str) -> Job:
        ...

    @abstractmethod
    def create_job(self, job_number: str) -> Job:
        ...

    @abstractmethod
    def update_job(self, job: Job) -> Job:
        ...


def _to_job(record: JobRecord) -> Job:
    return Job.model_validate(record.as_dict())


def normalize_job_number(job_number: str) -> str:
    cleaned = (job_number or "").strip()
    if not cleaned:
        raise InvariantViolation("Job number cannot be empty.")
    return cleaned


class SqlJobStore(JobStore):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def list_jobs(self) -> List[Job]:
        try:
            with self.session_factory() as db:
                rows = db.execute(
                    select(JobRecord).order_by(JobRecord.last_updated.desc(), JobRecord.id.asc())
                ).scalars().all()
                return [_to_job(r) for r in rows]
        except SQLAlchemyError as exc:
            logger.error("Error fetching jobs: %s", exc)
            raise StoreUnavailable("Could not load jobs") from exc

    def get_job(self, job_id: str) -> Job:
        try:
            with self.session_factory() as db:
                record = db.get(JobRecord, job_id)
                if record is None:
                    raise JobNotFound(job_id)
                return _to_job(record)
        except SQLAlchemyError as exc:
            logger.error("Error fetching job %s: %s", job_id, exc)
            raise StoreUnavailable("Could not load job") from exc

    def create_job(self, job_number: str) -> Job:
        job_number = normalize_job_number(job_number)
        try:
            with self.session_factory() as db:
                existing = db.execute(
                    select(JobRecord.id).where(JobRecord.job_number == job_number)
                ).first()
                if existing:
                    raise DuplicateJobNumber(job_number)

                record = JobRecord(
                    job_number=job_number,
                    status=JobStatus.PENDING.value,
                    checklist=[item.model_dump(mode="json") for item in generate_checklist()],
                    last_updated=utc_now(),
                    updated_by=SYSTEM_ACTOR,
                )
                db.add(record)
                try:
                    db.commit()
                except IntegrityError as exc:
                    # lost the race against a concurrent create with the same number
                    db.rollback()
                    raise DuplicateJobNumber(job_number) from exc
                db.refresh(record)
                logger.info("Created job %s (%s)", record.id, job_number)
                return _to_job(record)
        except SQLAlchemyError as exc:
            logger.error("Error adding job %s: %s", job_number, exc)
            raise StoreUnavailable("Could not save the new job") from exc

    def update_job(self, job: Job) -> Job:
        try:
            with self.session_factory() as db:
                record = db.get(JobRecord, job.id)
                if record is None:
                    raise JobNotFound(job.id)
                # job_number is fixed at creation
                record.status = job.status.value
                record.checklist = [item.model_dump(mode="json") for item in job.checklist]
                record.last_updated = job.last_updated
                record.updated_by = job.updated_by
                db.commit()
                db.refresh(record)
                return _to_job(record)
        except SQLAlchemyError as exc:
            logger.error("Error updating job %s: %s", job.id, exc)
            raise StoreUnavailable("Could not save changes") from exc
