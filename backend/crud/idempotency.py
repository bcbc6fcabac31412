"""
Request-key replay store for intercompany POST endpoints.

A stored response is written in the same transaction as the documents it
describes, so a replay either returns the full original result or nothing
was ever persisted for that key.
"""

import hashlib
import json
import logging
from typing import Optional

from sqlalchemy.orm import Session

from crud.exceptions import ConflictError
from models.idempotency_keys import IdempotencyKey

logger = logging.getLogger("idempotency")


def request_fingerprint(payload: dict) -> str:
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def find_replay(db: Session, tenant_id: str, endpoint: str, key: Optional[str], request_hash: str) -> Optional[IdempotencyKey]:
    """Stored response for this key, or None. A key reused with another body is a conflict."""
    if not key:
        return None
    record = db.query(IdempotencyKey).filter(
        IdempotencyKey.tenant_id == tenant_id,
        IdempotencyKey.endpoint == endpoint,
        IdempotencyKey.key == key
    ).first()
    if record is None:
        return None
    if record.request_hash != request_hash:
        raise ConflictError("Idempotency-Key was already used with a different request body.")
    logger.info(f"Replaying stored response for {endpoint} key '{key}' for tenant {tenant_id}")
    return record


def store_response(db: Session, tenant_id: str, endpoint: str, key: Optional[str], request_hash: str, status_code: int, body: dict):
    if not key:
        return None
    record = IdempotencyKey(
        tenant_id=tenant_id,
        endpoint=endpoint,
        key=key,
        request_hash=request_hash,
        status_code=status_code,
        response_body=body,
    )
    db.add(record)
    db.flush()
    return record
