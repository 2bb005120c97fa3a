import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Uuid
from shortlink_app.database.connection import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShortLink(Base):
    """
    Mapping from a short code to the original URL.

    Rows are written once and never updated. Uniqueness of ``code`` is
    enforced by the unique index, which is what arbitrates concurrent
    creators that picked the same candidate.
    """
    __tablename__ = "short_links"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # unique=True + index=True creates a unique index; length is not bounded
    # here because code_length is a per-app setting
    code = Column(String, unique=True, index=True, nullable=False)
    target_url = Column(String, nullable=False)
    short_url = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<ShortLink code={self.code!r} target_url={self.target_url!r}>"
