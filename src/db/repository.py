"""Protocol repositories (implemented with SQL Alchemy in sql_repository.py, as dictionaries in the service tests)"""

from typing import Protocol
from uuid import UUID

from src.core.models import GameHeaderModel, GameModel, MemberModel, UserModel


class NimGameRepository(Protocol):
    """Persistence of Nim game states"""

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Add new info to existing record."""
        ...


class MembershipRepository(Protocol):
    """Persistence of game headers and their rosters"""

    def create_header(
        self, owner: UserModel, description: str, owner_member: MemberModel
    ) -> GameHeaderModel:
        """Store a new game header together with the owner's roster entry (all or nothing) and return it with its new ID."""
        ...

    def get_header(self, game_id: UUID) -> GameHeaderModel | None:
        """Get header (including members) by ID, if record exists."""
        ...

    def update_description(self, game_id: UUID, description: str) -> GameHeaderModel | None:
        ...

    def list_members(self, game_id: UUID) -> list[MemberModel]:
        """All roster entries of a game. Empty for an unknown game."""
        ...

    def get_member(self, game_id: UUID, user_id: int) -> MemberModel | None:
        ...

    def add_member(self, game_id: UUID, member: MemberModel) -> MemberModel:
        """Insert a new roster entry. Must fail if the (user, game) pair already has one."""
        ...

    def update_member(self, game_id: UUID, member: MemberModel) -> MemberModel | None:
        """Overwrite role and acceptance of an existing roster entry."""
        ...

    def headers_for_user(self, user_id: int) -> list[GameHeaderModel]:
        """Every game the user holds a roster entry in."""
        ...


class UserRepository(Protocol):
    """Directory of known users (credentials are handled elsewhere)"""

    def get_user_by_name(self, username: str) -> UserModel | None:
        ...

    def list_users(self) -> list[UserModel]:
        ...

    def add_user(self, username: str) -> UserModel:
        ...
