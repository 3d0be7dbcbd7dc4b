import logging
from fastapi import APIRouter, Depends, HTTPException, status
from app.auth import get_current_admin, verify_admin_password
from app.core.sessions import get_session_store
from app.schemas.auth import LoginRequest, LoginResponse, MeResponse, SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin auth"])


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, store=Depends(get_session_store)):
    """Exchange the admin password for a fresh session token."""
    if not verify_admin_password(body.password):
        logger.warning("Admin login failed")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
    token = await store.create()
    logger.info("Admin login succeeded")
    return LoginResponse(token=token)


@router.post("/logout", response_model=SuccessResponse)
async def logout(token: str = Depends(get_current_admin), store=Depends(get_session_store)):
    await store.revoke(token)
    logger.info("Admin logged out")
    return SuccessResponse()


@router.get("/me", response_model=MeResponse)
async def me(_admin: str = Depends(get_current_admin)):
    return MeResponse()
