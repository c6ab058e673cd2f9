"""Requests and Response models"""

from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, NonNegativeInt, PositiveInt, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Role, Status, TokenState


def not_blank(value: str, field_name: str) -> str:
    if not value.strip():
        raise InvalidRequestError(f"{field_name} must not be blank.")
    return value


# --- REQUEST MODELS ---
class GameCreateRequest(BaseModel):
    description: str

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        return not_blank(value, "description")


class NimCreateRequest(BaseModel):
    """Anything left out falls back to the configured defaults."""

    token_count: Optional[PositiveInt] = None
    player_count: Optional[PositiveInt] = None
    max_tokens_per_move: Optional[PositiveInt] = None


class MoveRequest(BaseModel):
    game_id: UUID
    # A set: [1, 1, 2] is the same move as [2, 1]. Emptiness / size are rule checks, left to the game.
    token_indices: set[NonNegativeInt]


class MemberPayload(BaseModel):
    """Member as sent by a client. The id is optional: the user directory is the authority on ids."""

    id: Optional[int] = None
    username: str
    role: Role
    accepted: bool = False

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return not_blank(value, "username")


# --- SETUP MESSAGES (lobby phase) ---
class SetDescription(BaseModel):
    type: Literal["set_description"] = "set_description"
    description: str

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        return not_blank(value, "description")


class UpdateMember(BaseModel):
    type: Literal["update_member"] = "update_member"
    member: MemberPayload


SetupMessage = Annotated[Union[SetDescription, UpdateMember], Field(discriminator="type")]


# --- RESPONSE MODELS ---
class MemberResponse(BaseModel):
    id: int
    username: str
    role: Role
    accepted: bool


class GameHeaderResponse(BaseModel):
    game_id: UUID
    owner: str
    description: str
    members: list[MemberResponse]


class NimGameResponse(BaseModel):
    game_id: UUID
    tokens: list[TokenState]
    current_player: int
    player_count: int
    max_tokens_per_move: int
    status: Status
    winner: Optional[int]


class UserResponse(BaseModel):
    id: int
    username: str
