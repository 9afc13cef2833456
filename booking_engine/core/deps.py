from __future__ import annotations

import secrets

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from booking_engine.core.config import get_settings
from booking_engine.core.security import requester_id_from_token
from booking_engine.db.session import SessionLocal

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_requester(token: str = Depends(oauth2_scheme)) -> str:
    requester_id = requester_id_from_token(token)
    if not requester_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return requester_id


def require_payment_collaborator(x_payment_secret: str | None = Header(default=None)) -> None:
    """Gate for the payment collaborator's callbacks (shared secret header)."""
    expected = get_settings().payment_webhook_secret
    if not expected or not x_payment_secret or not secrets.compare_digest(expected, x_payment_secret):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
