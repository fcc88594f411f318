# app/routers/job_images_router.py
from fastapi import APIRouter, Depends, File, UploadFile, status

from app.config import MAX_UPLOAD_SIZE
from app.deps import get_actor, get_inspection_service
from app.errors import InvalidUpload
from app.services.inspection_service import InspectionService
from app.utils import success_resp

router = APIRouter(prefix="/api/jobs/{job_id}/items/{item_id}/images", tags=["job images"])


def _read_upload(file: UploadFile) -> bytes:
    if file.content_type and not file.content_type.startswith("image/"):
        raise InvalidUpload("Uploaded file must be an image (image/*).")
    # one byte past the limit is enough to reject
    data = file.file.read(MAX_UPLOAD_SIZE + 1)
    if len(data) > MAX_UPLOAD_SIZE:
        raise InvalidUpload(f"File too large. Limit is {MAX_UPLOAD_SIZE} bytes")
    return data


@router.post("", status_code=status.HTTP_201_CREATED)
def upload_image(
    job_id: str,
    item_id: str,
    file: UploadFile = File(...),
    actor: str = Depends(get_actor),
    service: InspectionService = Depends(get_inspection_service),
):
    job = service.add_image(job_id, item_id, _read_upload(file), actor)
    item = job.find_item(item_id)
    return success_resp(
        "Image uploaded successfully",
        {"image": item.images[-1], "images": item.images, "job_id": job.id},
        status.HTTP_201_CREATED,
    )


@router.delete("/{image_id}")
def remove_image(
    job_id: str,
    item_id: str,
    image_id: str,
    actor: str = Depends(get_actor),
    service: InspectionService = Depends(get_inspection_service),
):
    job = service.remove_image(job_id, item_id, image_id, actor)
    return success_resp("Image deleted successfully", {"images": job.find_item(item_id).images, "job_id": job.id})


@router.post("/{image_id}/analyze")
def analyze_image(
    job_id: str,
    item_id: str,
    image_id: str,
    actor: str = Depends(get_actor),
    service: InspectionService = Depends(get_inspection_service),
):
    job = service.analyze_image(job_id, item_id, image_id, actor)
    return success_resp("Image analyzed", {"comment": job.find_item(item_id).comment, "job_id": job.id})
