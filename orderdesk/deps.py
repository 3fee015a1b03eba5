# orderdesk/deps.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from orderdesk.core.database import SessionLocal
from orderdesk.core.request_context import set_request_context
from orderdesk.services.access_policy import Claims
from orderdesk.services.auth import decode_access_token
from orderdesk.services.record_store import RecordStore

# Token emitido pelo provedor de identidade; aqui apenas lemos os claims.
bearer_scheme = HTTPBearer(auto_error=False)

logger = logging.getLogger(__name__)

_record_store: RecordStore | None = None


def get_record_store() -> RecordStore:
    global _record_store
    if _record_store is None:
        _record_store = RecordStore(SessionLocal)
    return _record_store


def get_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Claims:
    """Claims of the caller, or anonymous claims when no token was sent."""
    if credentials is None:
        return Claims()

    try:
        payload = decode_access_token(credentials.credentials)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = Claims.from_token_payload(payload)
    request.state.user = claims
    set_request_context(user_id=claims.subject)
    return claims


def require_claims(claims: Claims = Depends(get_claims)) -> Claims:
    if not claims.subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims
