"""
Roster of a single game: who is associated with it, in which role, and whether they confirmed.

Pure domain logic. The service decides what to load and persist; the Roster only decides whether a request is allowed
and what the resulting entry looks like.
"""

from dataclasses import dataclass, replace
from typing import Self
from uuid import UUID

from src.core.exceptions import (
    GameStateError,
    NoSuchMemberError,
    NotAuthorizedError,
)
from src.core.models import MemberModel
from src.core.shared_types import Role

# Role given to whoever creates a game.
DEFAULT_OWNER_ROLE = Role.WHITE_PLAYER


@dataclass(frozen=True)
class Member:
    id: int
    username: str
    role: Role
    accepted: bool

    @classmethod
    def from_model(cls, model: MemberModel) -> Self:
        return cls(
            id=model.id,
            username=model.username,
            role=Role(model.role),
            accepted=model.accepted,
        )

    def to_model(self) -> MemberModel:
        return MemberModel(
            id=self.id, username=self.username, role=self.role, accepted=self.accepted
        )


def owner_entry(owner_id: int, owner_name: str) -> Member:
    """The creator skips the invitation step: accepted right away."""
    return Member(id=owner_id, username=owner_name, role=DEFAULT_OWNER_ROLE, accepted=True)


@dataclass
class Roster:
    game_id: UUID
    members: dict[int, Member]

    @classmethod
    def from_models(cls, game_id: UUID, models: list[MemberModel]) -> Self:
        """Build from stored rows. Two rows for the same user means the store is corrupt."""
        members: dict[int, Member] = {}
        for model in models:
            if model.id in members:
                raise GameStateError(
                    f"User {model.username!r} holds more than one membership of game {game_id}."
                )
            members[model.id] = Member.from_model(model)
        return cls(game_id, members)

    def is_member(self, user_id: int) -> bool:
        return user_id in self.members

    def assert_member(self, user_id: int) -> None:
        """Only members may change anything about a game."""
        if not self.is_member(user_id):
            raise NotAuthorizedError(
                f"User with {user_id=} is not a member of game {self.game_id}."
            )

    def update_member(self, acting_user_id: int, proposed: Member) -> tuple[Member, bool]:
        """
        Member asks to change the roster entry of `proposed`.
        ----
        - existing entry: only the role is taken over. Acceptance is never changed this way.
        - no entry yet: this is an invitation. accepted is forced to False, whatever the request says.

        Returns the resulting entry, and whether it is new.
        """
        self.assert_member(acting_user_id)

        existing = self.members.get(proposed.id)
        if existing is not None:
            updated = replace(existing, role=proposed.role)
            self.members[proposed.id] = updated
            return updated, False

        invited = replace(proposed, accepted=False)
        self.members[proposed.id] = invited
        return invited, True

    def accept(self, user_id: int) -> Member:
        """Invited user confirms they take part."""
        member = self.members.get(user_id)
        if member is None:
            raise NoSuchMemberError(
                f"User with {user_id=} was not invited to game {self.game_id}."
            )
        accepted = replace(member, accepted=True)
        self.members[user_id] = accepted
        return accepted

    def to_models(self) -> list[MemberModel]:
        return [member.to_model() for member in self.members.values()]
