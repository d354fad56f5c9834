"""Resolve the authenticated identity from an explicit request context."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from taskboard.core.config import settings
from taskboard.core.exceptions import Unauthorized
from taskboard.core.security import TokenCodec
from taskboard.schemas.userSchema import Identity


@dataclass(frozen=True)
class RequestContext:
    """Credential of the current request plus the codec able to verify it."""

    credential: Optional[str]
    codec: TokenCodec


def resolve_current_user(ctx: RequestContext) -> Optional[Identity]:
    if not ctx.credential:
        return None
    return ctx.codec.decode(ctx.credential)


def require_user(ctx: RequestContext) -> Identity:
    """Raises Unauthorized when the request carries no valid credential."""
    identity = resolve_current_user(ctx)
    if identity is None:
        raise Unauthorized()
    return identity


def get_request_context(request: Request) -> RequestContext:
    """
    FastAPI dependency building the context from the auth cookie.
    Usage:
    @router.get("/")
    async def endpoint(ctx: RequestContext = Depends(get_request_context)):
        ...
    """
    return RequestContext(
        credential=request.cookies.get(settings.AUTH_COOKIE_NAME),
        codec=request.app.state.token_codec,
    )
