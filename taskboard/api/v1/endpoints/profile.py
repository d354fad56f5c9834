from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.database import aget_db
from taskboard.core.session import RequestContext, get_request_context
from taskboard.repositories.user_repository import UserRepository
from taskboard.schemas.userSchema import ProfileEnvelope
from taskboard.services.profile_service import ProfileService

router = APIRouter(
    prefix="/profile",
    tags=["profile"]
)


def get_profile_service(db: AsyncSession = Depends(aget_db)) -> ProfileService:
    return ProfileService(UserRepository(db))


@router.get("", response_model=ProfileEnvelope)
async def get_profile(
    ctx: RequestContext = Depends(get_request_context),
    service: ProfileService = Depends(get_profile_service),
):
    """
    Return the current user's profile.
    """
    return {"user": await service.get_profile(ctx)}
