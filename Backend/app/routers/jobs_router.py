# app/routers/jobs_router.py
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.deps import get_actor, get_inspection_service, get_job_cache
from app.errors import StoreUnavailable
from app.schemas.job import ChecklistItemUpdate, JobCreate, JobReplace, StatusToggle, JOB_STATUS_LABELS
from app.services.inspection_service import InspectionService
from app.services.job_cache import JobCache
from app.services.job_report import XLSX_MEDIA_TYPE, build_jobs_workbook
from app.services.job_service import checklist_progress, summarize
from app.utils import error_resp, success_resp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def _job_detail(job):
    checked, total = checklist_progress(job)
    data = job.model_dump(mode="json")
    data["status_label"] = JOB_STATUS_LABELS[job.status]
    data["progress"] = {"checked": checked, "total": total}
    return data


# ----------------------------
# LIST / SEARCH
# ----------------------------
@router.get("")
def list_jobs(
    search: Optional[str] = Query(None, description="Substring of the job number, case-insensitive"),
    cache: JobCache = Depends(get_job_cache),
):
    try:
        cache.ensure_loaded()
    except StoreUnavailable:
        return error_resp("Jobs are still loading", 503, data={"loading": True})
    jobs = cache.search(search)
    return success_resp("Jobs fetched successfully", [summarize(job) for job in jobs])


# ----------------------------
# CREATE
# ----------------------------
@router.post("", status_code=201)
def create_job(body: JobCreate, service: InspectionService = Depends(get_inspection_service)):
    job = service.create_job(body.job_number)
    return success_resp("Job created successfully", _job_detail(job), 201)


# ----------------------------
# EXPORT
# ----------------------------
@router.get("/export-to-excel")
def export_jobs_to_excel(
    search: Optional[str] = Query(None, description="Same filter as the job list"),
    cache: JobCache = Depends(get_job_cache),
):
    """Download the (optionally filtered) job list with every checklist result as an .xlsx file"""
    try:
        cache.ensure_loaded()
    except StoreUnavailable:
        return error_resp("Jobs are still loading", 503, data={"loading": True})
    content = build_jobs_workbook(cache.search(search))
    filename = f"qc_jobs_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ----------------------------
# DETAIL
# ----------------------------
@router.get("/{job_id}")
def get_job(job_id: str, service: InspectionService = Depends(get_inspection_service)):
    return success_resp("Job fetched successfully", _job_detail(service.get_job(job_id)))


@router.put("/{job_id}")
def replace_job(
    job_id: str,
    body: JobReplace,
    actor: str = Depends(get_actor),
    service: InspectionService = Depends(get_inspection_service),
):
    job = service.replace(job_id, body.status, body.checklist, actor)
    return success_resp("Job replaced successfully", _job_detail(job))


@router.post("/{job_id}/finalize")
def finalize_job(
    job_id: str,
    actor: str = Depends(get_actor),
    service: InspectionService = Depends(get_inspection_service),
):
    job = service.finalize(job_id, actor)
    return success_resp(f"Job marked as {JOB_STATUS_LABELS[job.status]}", _job_detail(job))


# ----------------------------
# CHECKLIST ITEMS
# ----------------------------
@router.patch("/{job_id}/items/{item_id}")
def update_item(
    job_id: str,
    item_id: str,
    body: ChecklistItemUpdate,
    actor: str = Depends(get_actor),
    service: InspectionService = Depends(get_inspection_service),
):
    job = service.update_item(job_id, item_id, actor, status=body.status, comment=body.comment)
    return success_resp("Checklist item updated", _job_detail(job))


@router.post("/{job_id}/items/{item_id}/toggle")
def toggle_item_status(
    job_id: str,
    item_id: str,
    body: StatusToggle,
    actor: str = Depends(get_actor),
    service: InspectionService = Depends(get_inspection_service),
):
    job = service.toggle_item_status(job_id, item_id, body.status, actor)
    return success_resp("Checklist item updated", _job_detail(job))
