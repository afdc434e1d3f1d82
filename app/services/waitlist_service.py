import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from pymongo.errors import DuplicateKeyError

from app.core.config import settings
from app.core.database import MongoConnector
from app.core.exceptions import DuplicateEntryError, ValidationError
from app.models.waitlist_entry import WaitlistEntry
from app.utils.audit import audit

logger = logging.getLogger(__name__)

# local-part@domain.tld, no whitespace and a single "@"
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

INVALID_EMAIL_MESSAGE = "Valid email address is required"
DUPLICATE_EMAIL_MESSAGE = "This email is already on the waitlist"
JOINED_MESSAGE = "Successfully joined the waitlist!"


def is_valid_email(email: Any) -> bool:
    if not isinstance(email, str) or not email:
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None


def normalize_email(email: str) -> str:
    return email.lower()


class RejectionReason(str, Enum):
    INVALID_EMAIL = "invalid_email"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class JoinAccepted:
    count: int
    message: str = JOINED_MESSAGE


@dataclass(frozen=True)
class JoinRejected:
    reason: RejectionReason
    message: str


JoinResult = Union[JoinAccepted, JoinRejected]


class WaitlistService:
    def __init__(
        self,
        connector: MongoConnector,
        collection_name: Optional[str] = None,
        source: Optional[str] = None,
    ):
        self.connector = connector
        self.collection_name = collection_name or settings.WAITLIST_COLLECTION
        self.source = source or settings.WAITLIST_SOURCE

    async def _collection(self):
        return await self.connector.get_collection(self.collection_name)

    async def count(self) -> int:
        collection = await self._collection()
        return await collection.count_documents({})

    async def join(self, email: Any) -> JoinResult:
        """Add an email to the waitlist.

        Invalid and duplicate emails come back as JoinRejected. Database
        failures are not caught here and propagate to the caller.
        """
        try:
            normalized = self._validate(email)
            collection = await self._collection()
            await self._insert(collection, normalized)
        except ValidationError as e:
            return JoinRejected(RejectionReason.INVALID_EMAIL, e.message)
        except DuplicateEntryError as e:
            audit("WAITLIST_DUPLICATE", email=e.details)
            return JoinRejected(RejectionReason.DUPLICATE, e.message)

        audit("WAITLIST_JOINED", email=normalized, source=self.source)
        return JoinAccepted(count=await collection.count_documents({}))

    def _validate(self, email: Any) -> str:
        if not is_valid_email(email):
            raise ValidationError(INVALID_EMAIL_MESSAGE, error_code="invalid_email")
        return normalize_email(email)

    async def _insert(self, collection, email: str) -> None:
        # Fast path; the unique index still decides when two signups race
        if await collection.find_one({"email": email}):
            raise DuplicateEntryError(DUPLICATE_EMAIL_MESSAGE, details=email)

        entry = WaitlistEntry(email=email, source=self.source)
        try:
            await collection.insert_one(entry.to_document())
        except DuplicateKeyError:
            logger.info("Concurrent waitlist signup resolved by unique index")
            raise DuplicateEntryError(DUPLICATE_EMAIL_MESSAGE, details=email)
