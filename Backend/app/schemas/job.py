from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ChecklistStatus(str, Enum):
    UNCHECKED = "UNCHECKED"
    PASS = "PASS"
    FAIL = "FAIL"


class JobStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    PASSED = "PASSED"
    FAILED = "FAILED"
    REWORK = "REWORK"


# display labels live apart from the status values
JOB_STATUS_LABELS = {
    JobStatus.PENDING: "Inspection Pending",
    JobStatus.IN_PROGRESS: "In Progress",
    JobStatus.PASSED: "QC Passed",
    JobStatus.FAILED: "QC Failed",
    JobStatus.REWORK: "Rework Required",
}


# ---------------------------------------------------------
# DOMAIN VALUES (frozen, replaced wholesale on every edit)
# ---------------------------------------------------------
class ChecklistItemImage(BaseModel):
    id: str
    url: str

    class Config:
        frozen = True


class ChecklistItem(BaseModel):
    id: str
    name: str
    status: ChecklistStatus = ChecklistStatus.UNCHECKED
    comment: str = ""
    images: List[ChecklistItemImage] = Field(default_factory=list)
    is_optional: bool = False

    class Config:
        frozen = True

    def find_image(self, image_id: str) -> Optional[ChecklistItemImage]:
        return next((img for img in self.images if img.id == image_id), None)


class Job(BaseModel):
    id: str
    job_number: str
    status: JobStatus = JobStatus.PENDING
    checklist: List[ChecklistItem]
    last_updated: datetime
    updated_by: str

    class Config:
        frozen = True

    @field_validator("last_updated")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # MySQL and SQLite hand back naive datetimes
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def find_item(self, item_id: str) -> Optional[ChecklistItem]:
        return next((item for item in self.checklist if item.id == item_id), None)


# ---------------------------------------------------------
# REQUEST SCHEMAS
# ---------------------------------------------------------
class JobCreate(BaseModel):
    job_number: str = Field(..., description="Unique job number, e.g. BIFOLD-100")

    class Config:
        json_schema_extra = {"example": {"job_number": "BIFOLD-100"}}


class ChecklistItemUpdate(BaseModel):
    status: Optional[ChecklistStatus] = None
    comment: Optional[str] = None

    class Config:
        json_schema_extra = {"example": {"status": "FAIL", "comment": "Handle is chrome, should be matte black."}}


class StatusToggle(BaseModel):
    status: ChecklistStatus


class JobReplace(BaseModel):
    status: JobStatus
    checklist: List[ChecklistItem]


# ---------------------------------------------------------
# RESPONSE SCHEMAS
# ---------------------------------------------------------
class JobSummary(BaseModel):
    id: str
    job_number: str
    status: JobStatus
    status_label: str
    checked: int
    total: int
    last_updated: datetime
    updated_by: str
