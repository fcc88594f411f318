import uuid

from sqlalchemy import Column, String, DateTime, JSON, func
from sqlalchemy.dialects import mysql
from app.database import Base


def _new_job_id() -> str:
    return uuid.uuid4().hex


class JobRecord(Base):
    """Model for jobs table - one row per inspected unit, checklist stored inline"""
    __tablename__ = "jobs"

    id = Column(String(32), primary_key=True, default=_new_job_id)
    job_number = Column(String(64), nullable=False, unique=True, index=True)
    status = Column(String(32), nullable=False, default="PENDING")

    # ordered list of checklist item objects (id, name, status, comment, images, is_optional)
    checklist = Column(JSON, nullable=False, default=list)

    # MySQL DATETIME drops fractions of a second unless fsp is set
    last_updated = Column(
        DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), "mysql"),
        nullable=False,
        index=True,
    )
    updated_by = Column(String(255), nullable=False, default="System")
    created_at = Column(DateTime, default=func.now())

    def as_dict(self):
        """Convert to dictionary for JSON serialization"""
        return {
            "id": self.id,
            "job_number": self.job_number,
            "status": self.status,
            "checklist": self.checklist or [],
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "updated_by": self.updated_by,
        }
