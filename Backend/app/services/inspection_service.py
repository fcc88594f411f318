# app/services/inspection_service.py
"""
Operations behind the job list and job detail screens.

Each call reads the current job from the store, applies one aggregate mutation
and writes the whole job back (last write wins). The change feed then tells
every cache to re-list.
"""
import logging
from typing import Optional, Sequence

from app.errors import AttachmentStoreFailure, InvariantViolation, QcError
from app.schemas.job import ChecklistItem, ChecklistStatus, Job, JobStatus
from app.services import job_service
from app.services.annotation_service import AnnotationProvider, build_prompt
from app.services.attachment_service import AttachmentManager
from app.services.job_store import JobStore

logger = logging.getLogger(__name__)


class InspectionService:
    def __init__(self, store: JobStore, attachments: AttachmentManager, annotator: AnnotationProvider):
        self.store = store
        self.attachments = attachments
        self.annotator = annotator

    # ---------------------------------------------------------------
    # Jobs
    # ---------------------------------------------------------------
    def create_job(self, job_number: str) -> Job:
        return self.store.create_job(job_number)

    def get_job(self, job_id: str) -> Job:
        return self.store.get_job(job_id)

    def finalize(self, job_id: str, actor: str) -> Job:
        job = self.store.get_job(job_id)
        finalized = job_service.finalize_job(job, actor)
        logger.info("Job %s finalized as %s by %s", job.job_number, finalized.status.value, actor)
        return self.store.update_job(finalized)

    def replace(self, job_id: str, status: JobStatus, checklist: Sequence[ChecklistItem], actor: str) -> Job:
        job = self.store.get_job(job_id)
        return self.store.update_job(job_service.replace_job(job, status, checklist, actor))

    # ---------------------------------------------------------------
    # Checklist items
    # ---------------------------------------------------------------
    def update_item(
        self,
        job_id: str,
        item_id: str,
        actor: str,
        status: Optional[ChecklistStatus] = None,
        comment: Optional[str] = None,
    ) -> Job:
        job = self.store.get_job(job_id)
        item = job_service.require_item(job, item_id)
        updated = job_service.edit_item(item, status=status, comment=comment)
        return self.store.update_job(job_service.update_item(job, updated, actor))

    def toggle_item_status(self, job_id: str, item_id: str, status: ChecklistStatus, actor: str) -> Job:
        job = self.store.get_job(job_id)
        item = job_service.require_item(job, item_id)
        return self.store.update_job(job_service.update_item(job, job_service.toggle_status(item, status), actor))

    # ---------------------------------------------------------------
    # Images
    # ---------------------------------------------------------------
    def add_image(self, job_id: str, item_id: str, data: bytes, actor: str) -> Job:
        job_service.require_item(self.store.get_job(job_id), item_id)

        image = self.attachments.add_image(job_id, item_id, data)
        try:
            job = self.store.get_job(job_id)
            item = job_service.require_item(job, item_id)
            return self.store.update_job(job_service.update_item(job, job_service.add_image(item, image), actor))
        except QcError:
            logger.warning("Image %s uploaded for job %s item %s but the record was not updated; removing blob",
                           image.id, job_id, item_id)
            try:
                self.attachments.remove_image(image.id, image.url)
            except AttachmentStoreFailure:
                logger.error("Orphaned blob left behind: %s", image.url)
            raise

    def remove_image(self, job_id: str, item_id: str, image_id: str, actor: str) -> Job:
        job = self.store.get_job(job_id)
        item = job_service.require_item(job, item_id)
        image = item.find_image(image_id)
        if image is None:
            raise InvariantViolation(f"Image '{image_id}' is not attached to item '{item_id}'")

        self.attachments.remove_image(image.id, image.url)
        try:
            job = self.store.get_job(job_id)
            item = job_service.require_item(job, item_id)
            return self.store.update_job(job_service.update_item(job, job_service.drop_image(item, image_id), actor))
        except QcError:
            logger.warning("Blob for image %s deleted but job %s still references %s", image_id, job_id, image.url)
            raise

    def analyze_image(self, job_id: str, item_id: str, image_id: str, actor: str) -> Job:
        """Replace the item comment with the annotation service's description of the image."""
        job = self.store.get_job(job_id)
        item = job_service.require_item(job, item_id)
        image = item.find_image(image_id)
        if image is None:
            raise InvariantViolation(f"Image '{image_id}' is not attached to item '{item_id}'")

        data, mime_type = self.attachments.read_image(image.url)
        text = self.annotator.annotate(data, mime_type, build_prompt(item.name))

        job = self.store.get_job(job_id)
        item = job_service.require_item(job, item_id)
        return self.store.update_job(job_service.update_item(job, job_service.edit_item(item, comment=text), actor))
