# app/services/status_engine.py
from typing import Iterable

from app.schemas.job import ChecklistItem, ChecklistStatus, Job, JobStatus


def derive_job_status(checklist: Iterable[ChecklistItem]) -> JobStatus:
    """
    Overall status from the mandatory items only:
      any FAIL                      -> REWORK
      all PASS (and at least one)   -> PASSED
      otherwise                     -> IN_PROGRESS
    Optional items are ignored. FAILED is never produced here.
    """
    mandatory = [item for item in checklist if not item.is_optional]

    has_fail = any(item.status == ChecklistStatus.FAIL for item in mandatory)
    # no mandatory items is not a pass
    all_pass = len(mandatory) > 0 and all(item.status == ChecklistStatus.PASS for item in mandatory)

    if has_fail:
        return JobStatus.REWORK
    if all_pass:
        return JobStatus.PASSED
    return JobStatus.IN_PROGRESS


def finalize(job: Job) -> JobStatus:
    return derive_job_status(job.checklist)
