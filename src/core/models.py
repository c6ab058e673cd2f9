"""
Boundary layer data model(s).

These objects can be used to communicate with the Services.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Services
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from src.core.shared_types import Role

# Type aliases to make the models easier to read
TokenName = str
UserID = int


@dataclass
class GameModel:
    """Transport-safe representation of a Nim game used between API, Service, DB, and Game layers."""

    tokens: list[TokenName]
    current_player: int
    player_count: int
    max_tokens_per_move: int
    status: str
    winner: Optional[int] = None


@dataclass
class MemberModel:
    """One user's membership of one game."""

    id: UserID
    username: str
    role: Role
    accepted: bool


@dataclass
class GameHeaderModel:
    """Lobby record of a game together with its roster."""

    id: UUID
    owner: str
    description: str
    members: list[MemberModel] = field(default_factory=list)


@dataclass
class UserModel:
    id: UserID
    username: str
