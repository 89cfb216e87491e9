"""Key-value record model backing the blob store."""

from datetime import UTC, datetime

from sqlalchemy import LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from skill_seekers.models.base import Base


class KeyValueRecord(Base):
    """One stored value: a job record, a skill archive or skill metadata.

    Attributes:
        key: Record key (``job-<id>``, ``<skill_id>``, ``<skill_id>-meta``)
        content_type: MIME type of the stored bytes
        data: Raw bytes; structured values are stored as UTF-8 JSON
        updated_at: Time of the last write
    """

    __tablename__ = "kv_records"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    def __repr__(self) -> str:
        """String representation of KeyValueRecord.

        Returns:
            String representation showing key, content type and size
        """
        return f"<KeyValueRecord(key={self.key}, content_type={self.content_type}, size={len(self.data)})>"
