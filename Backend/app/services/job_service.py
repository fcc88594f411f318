# app/services/job_service.py
"""
Pure mutations of the job aggregate.

Every function returns a new Job value; nothing here talks to the store.
Only status, comment and images of an item ever change, the checklist keeps
its length, order, ids and optional flags for the lifetime of the job.
"""
from datetime import datetime
from typing import Optional, Sequence, Tuple

from app.errors import InvariantViolation
from app.schemas.job import (
    ChecklistItem,
    ChecklistItemImage,
    ChecklistStatus,
    Job,
    JobStatus,
    JobSummary,
    JOB_STATUS_LABELS,
)
from app.services.status_engine import finalize
from app.utils import utc_now


def _stamp(job: Job, actor: str, now: Optional[datetime], **changes) -> Job:
    changes["last_updated"] = now or utc_now()
    changes["updated_by"] = actor
    return job.model_copy(update=changes)


def require_item(job: Job, item_id: str) -> ChecklistItem:
    item = job.find_item(item_id)
    if item is None:
        raise InvariantViolation(f"Checklist item '{item_id}' does not exist on job {job.id}")
    return item


def update_item(job: Job, updated_item: ChecklistItem, actor: str, now: Optional[datetime] = None) -> Job:
    """Swap the checklist entry with the same id for updated_item."""
    current = require_item(job, updated_item.id)
    if current.is_optional != updated_item.is_optional or current.name != updated_item.name:
        raise InvariantViolation(f"Checklist item '{updated_item.id}' cannot change its name or optional flag")

    checklist = [updated_item if item.id == updated_item.id else item for item in job.checklist]
    return _stamp(job, actor, now, checklist=checklist)


def toggle_status(item: ChecklistItem, status: ChecklistStatus) -> ChecklistItem:
    # selecting the current status again clears it
    new_status = ChecklistStatus.UNCHECKED if item.status == status else status
    return item.model_copy(update={"status": new_status})


def edit_item(
    item: ChecklistItem,
    status: Optional[ChecklistStatus] = None,
    comment: Optional[str] = None,
) -> ChecklistItem:
    changes = {}
    if status is not None:
        changes["status"] = status
    if comment is not None:
        changes["comment"] = comment
    return item.model_copy(update=changes)


def add_image(item: ChecklistItem, image: ChecklistItemImage) -> ChecklistItem:
    return item.model_copy(update={"images": [*item.images, image]})


def drop_image(item: ChecklistItem, image_id: str) -> ChecklistItem:
    return item.model_copy(update={"images": [img for img in item.images if img.id != image_id]})


def finalize_job(job: Job, actor: str, now: Optional[datetime] = None) -> Job:
    return _stamp(job, actor, now, status=finalize(job))


def _shape(checklist: Sequence[ChecklistItem]):
    # everything except status, comment and images is fixed at creation
    return [item.model_dump(exclude={"status", "comment", "images"}) for item in checklist]


def replace_job(
    job: Job,
    status: JobStatus,
    checklist: Sequence[ChecklistItem],
    actor: str,
    now: Optional[datetime] = None,
) -> Job:
    """Wholesale replacement of status and checklist, shape must match the stored job."""
    if _shape(job.checklist) != _shape(checklist):
        raise InvariantViolation(f"Checklist of job {job.id} must keep its items, names, order and optional flags")
    return _stamp(job, actor, now, status=status, checklist=list(checklist))


def checklist_progress(job: Job) -> Tuple[int, int]:
    checked = sum(1 for item in job.checklist if item.status != ChecklistStatus.UNCHECKED)
    return checked, len(job.checklist)


def summarize(job: Job) -> JobSummary:
    checked, total = checklist_progress(job)
    return JobSummary(
        id=job.id,
        job_number=job.job_number,
        status=job.status,
        status_label=JOB_STATUS_LABELS[job.status],
        checked=checked,
        total=total,
        last_updated=job.last_updated,
        updated_by=job.updated_by,
    )
