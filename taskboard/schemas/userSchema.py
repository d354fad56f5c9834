from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taskboard.schemas.common import UtcDatetime


class Identity(BaseModel):
    """Authenticated user derived from a verified credential."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str


class ProfileResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    email: str
    created_at: UtcDatetime


class ProfileEnvelope(BaseModel):
    user: ProfileResponse
