import hmac
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import get_settings
from app.core.sessions import get_session_store

security = HTTPBearer(auto_error=False)


def verify_admin_password(plain: str) -> bool:
    """Exact match against the configured admin secret. An empty secret never matches."""
    secret = get_settings().admin_password
    if not secret or not plain:
        return False
    return hmac.compare_digest(plain.encode("utf-8"), secret.encode("utf-8"))


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    store=Depends(get_session_store),
) -> str:
    """Admin must present a Bearer token that is in the session store. Returns the token."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    if not await store.is_valid(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token
