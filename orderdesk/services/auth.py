from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

from jose import JWTError, jwt

from orderdesk.core.config import JWT_ALGORITHM, JWT_EXPIRE_MINUTES, JWT_SECRET_KEY


# =========================
# JWT HELPERS
# - tokens are issued by the identity provider upstream;
#   create_access_token serves local runs and tests
# =========================
def create_access_token(
    subject: str,
    groups: Optional[Iterable[str]] = None,
    extra: Optional[Dict[str, Any]] = None,
    expires_minutes: int = JWT_EXPIRE_MINUTES,
) -> str:
    """
    IMPORTANTE:
    - "sub" precisa ser STRING (senão dá 'Subject must be a string')
    """
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=expires_minutes)

    payload: Dict[str, Any] = {
        "sub": str(subject),
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if groups:
        payload["cognito:groups"] = list(groups)
    if extra:
        payload.update(extra)

    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Retorna o payload do JWT ou levanta ValueError se inválido.
    """
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        raise ValueError("Invalid or expired token") from e
