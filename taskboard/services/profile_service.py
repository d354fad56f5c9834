from taskboard.core.exceptions import NotFound, operation_boundary
from taskboard.core.session import RequestContext, require_user
from taskboard.repositories.user_repository import UserRepository
from taskboard.schemas.userSchema import ProfileResponse


class ProfileService:
    def __init__(self, repository: UserRepository):
        self.users = repository

    @operation_boundary("Profile fetch")
    async def get_profile(self, ctx: RequestContext) -> ProfileResponse:
        """Current user's profile; the name falls back to the email's local part."""
        identity = require_user(ctx)

        user = await self.users.get(identity.id)
        if user is None:
            raise NotFound("User not found")

        return ProfileResponse(
            id=user.id,
            name=user.display_name,
            email=user.email,
            created_at=user.created_at,
        )
