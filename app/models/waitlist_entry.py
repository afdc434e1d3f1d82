from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WaitlistEntry(BaseModel):
    """A single signup stored in the waitlist collection.

    Field aliases match the stored document keys (``joinedAt``).
    """
    email: str
    joined_at: datetime = Field(default_factory=_utcnow, alias="joinedAt")
    source: str

    model_config = ConfigDict(populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
