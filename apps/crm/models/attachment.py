"""Attachment model - metadata for a file held in blob storage."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from apps.crm.database import Base


class Attachment(Base):
    """Pointer to an uploaded file attached to a follow-up record."""

    __tablename__ = "attachments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    file_name = Column(String(255), nullable=False)
    file_url = Column(Text, nullable=False)
    file_type = Column(String(50), nullable=False)  # image, pdf, document, spreadsheet, text, other
    file_size = Column(Integer, nullable=True)  # Bytes
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    follow_up_record_id = Column(
        String(36),
        ForeignKey("follow_up_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Relationships
    follow_up_record = relationship("FollowUpRecord", back_populates="attachments")

    def __repr__(self) -> str:
        return f"<Attachment(id={self.id}, file_name={self.file_name}, file_type={self.file_type})>"
