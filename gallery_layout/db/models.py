"""Read model for gallery submissions.

The submission platform owns this table; the layout service only reads
the columns it needs to order an issue.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SQLEnum,
    Float,
    Integer,
)

from gallery_layout.db.base import Base


class SubmissionStatus(str, Enum):
    """Review status of a submission."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SELECTED = "selected"


class Submission(Base):
    """Submission model."""

    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    issue_id = Column(Integer, nullable=False, index=True)
    status = Column(SQLEnum(SubmissionStatus), default=SubmissionStatus.PENDING, nullable=False)

    # Stored image dimensions; null for legacy rows not yet backfilled
    image_width = Column(Integer, nullable=True)
    image_height = Column(Integer, nullable=True)
    aspect_ratio = Column(Float, nullable=True)

    submitted_at = Column(DateTime, default=datetime.utcnow)

    @property
    def has_dimension_data(self) -> bool:
        return bool(self.image_width and self.image_height and self.image_width > 0 and self.image_height > 0)
