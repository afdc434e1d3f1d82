import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_logger = logging.getLogger("audit")


def _email_hash(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return hashlib.sha256(email.lower().encode()).hexdigest()[:12]


def audit(event: str, *, email: Optional[str] = None, **fields: Any) -> None:
    """Emit a waitlist audit event as a single JSON line.

    The email is hashed, never written in clear.
    """
    payload: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event,
    }
    if email:
        payload["email_hash"] = _email_hash(email)
    payload.update(fields)
    _logger.info(json.dumps(payload, ensure_ascii=False, default=str))
