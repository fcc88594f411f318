# app/deps.py
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from app.config import DEFAULT_ACTOR
from app.database import SessionLocal
from app.services.annotation_service import AnnotationProvider, get_annotation_provider
from app.services.attachment_service import AttachmentManager
from app.services.binary_store import BinaryStore, get_binary_store
from app.services.change_feed import job_feed
from app.services.inspection_service import InspectionService
from app.services.job_cache import JobCache
from app.services.job_store import SqlJobStore

job_store = SqlJobStore(SessionLocal)
job_cache = JobCache(job_store, job_feed)


@lru_cache
def get_store() -> BinaryStore:
    return get_binary_store()


@lru_cache
def get_annotator() -> AnnotationProvider:
    return get_annotation_provider()


def get_job_cache() -> JobCache:
    return job_cache


def get_inspection_service(
    store: BinaryStore = Depends(get_store),
    annotator: AnnotationProvider = Depends(get_annotator),
) -> InspectionService:
    return InspectionService(job_store, AttachmentManager(store), annotator)


def get_actor(x_actor: Optional[str] = Header(None)) -> str:
    """Actor stamped into updated_by; a plain display name, not an identity check."""
    actor = (x_actor or "").strip()
    return actor or DEFAULT_ACTOR
