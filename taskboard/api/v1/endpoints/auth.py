from datetime import timedelta
import logging

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse

from taskboard.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)

# -----------------------------
# Cookie Helpers
# -----------------------------
def set_auth_cookie(response: Response, token: str, expires: timedelta):
    """Set auth cookie."""
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
        domain=settings.COOKIE_DOMAIN,
        path="/",
        max_age=int(expires.total_seconds())
    )

def clear_auth_cookie(response: Response):
    """Clear auth cookie."""
    set_auth_cookie(response, "", timedelta(0))

# -----------------------------
# Logout
# -----------------------------
@router.post("/logout")
async def logout():
    response = JSONResponse({"message": "Logged out successfully"})
    clear_auth_cookie(response)
    return response
