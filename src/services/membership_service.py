"""Orchestration of game lobbies: creating games, inviting users, changing roles and descriptions."""

import logging
from uuid import UUID

from src.api.models import (
    GameCreateRequest,
    GameHeaderResponse,
    MemberPayload,
    MemberResponse,
    SetDescription,
    SetupMessage,
    UpdateMember,
    UserResponse,
    not_blank,
)
from src.core.exceptions import (
    NotAuthorizedError,
    RepositoryError,
    UnknownUserError,
)
from src.core.locks import KeyedLock
from src.core.models import GameHeaderModel, MemberModel, UserModel
from src.db.repository import MembershipRepository, UserRepository
from src.membership.roster import Member, Roster, owner_entry

logger = logging.getLogger(__name__)


class MembershipService:
    """Orchestration of layers for game rosters."""

    def __init__(
        self,
        repository: MembershipRepository,
        users: UserRepository,
        locks: KeyedLock | None = None,
    ) -> None:
        self.repo = repository
        self.users = users
        # Keyed by (user id, game id): the "is there an entry already?" check and the insert are one step.
        self.locks = locks if locks is not None else KeyedLock()

    # -- Mutations --
    def create(self, owner_username: str, request: GameCreateRequest) -> GameHeaderResponse:
        """A known user opens a new game. They become its first member, already accepted."""
        owner = self.users.get_user_by_name(owner_username)
        if owner is None:
            raise UnknownUserError(f"Cannot create game. Unknown user {owner_username!r}.")

        # Header and owner entry are stored together: a game never exists without its creator on the roster
        header = self.repo.create_header(
            owner, request.description, owner_entry(owner.id, owner.username).to_model()
        )

        logger.info("User %r created game %s", owner.username, header.id)
        return self._create_header_response(self._fetch_header(header.id))

    def update_description(
        self, acting_username: str, game_id: UUID, new_description: str
    ) -> GameHeaderResponse:
        """Any member may rename the game."""
        not_blank(new_description, "description")
        self._fetch_header(game_id)
        acting = self._resolve_acting_user(acting_username, game_id)
        self._assert_member(acting, game_id)

        updated = self.repo.update_description(game_id, new_description)
        if updated is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        logger.info("User %r changed description of game %s", acting.username, game_id)
        return self._create_header_response(updated)

    def update_member(
        self, acting_username: str, game_id: UUID, proposed_member: MemberPayload
    ) -> MemberResponse:
        """
        A member changes the roster.
        ----
        - target already in the roster: their role is changed (acceptance stays as is)
        - target not in the roster: they get invited (never accepted on their behalf)
        """
        self._fetch_header(game_id)
        acting = self._resolve_acting_user(acting_username, game_id)
        self._assert_member(acting, game_id)

        target = self.users.get_user_by_name(proposed_member.username)
        if target is None:
            raise UnknownUserError(
                f"Cannot add {proposed_member.username!r} to game {game_id}. Unknown user."
            )
        proposed = Member(
            id=target.id,
            username=target.username,
            role=proposed_member.role,
            accepted=proposed_member.accepted,
        )

        with self.locks.hold((target.id, game_id)):
            # Load the roster only once the lock is held, so the existence check sees every earlier insert
            roster = Roster.from_models(game_id, self.repo.list_members(game_id))
            result, is_new = roster.update_member(acting.id, proposed)
            if is_new:
                self.repo.add_member(game_id, result.to_model())
            else:
                self.repo.update_member(game_id, result.to_model())

        if is_new:
            logger.info(
                "User %r invited %r to game %s as %s",
                acting.username,
                target.username,
                game_id,
                result.role,
            )
        else:
            logger.info(
                "User %r set role of %r in game %s to %s",
                acting.username,
                target.username,
                game_id,
                result.role,
            )
        return self._create_member_response(result.to_model())

    def accept_invitation(self, acting_username: str, game_id: UUID) -> MemberResponse:
        """The invited user confirms they take part."""
        self._fetch_header(game_id)
        acting = self._resolve_acting_user(acting_username, game_id)

        with self.locks.hold((acting.id, game_id)):
            roster = Roster.from_models(game_id, self.repo.list_members(game_id))
            was_accepted = roster.is_member(acting.id) and roster.members[acting.id].accepted
            accepted = roster.accept(acting.id)
            if not was_accepted:
                self.repo.update_member(game_id, accepted.to_model())
                logger.info("User %r accepted invitation to game %s", acting.username, game_id)
        return self._create_member_response(accepted.to_model())

    def handle_setup_message(
        self, acting_username: str, game_id: UUID, message: SetupMessage
    ) -> GameHeaderResponse | MemberResponse:
        """Dispatch one of the lobby messages a client can send."""
        if isinstance(message, SetDescription):
            return self.update_description(acting_username, game_id, message.description)
        if isinstance(message, UpdateMember):
            return self.update_member(acting_username, game_id, message.member)
        raise TypeError(f"Unsupported setup message: {message!r}")

    # -- Read operations (absence is not an error) --
    def list_members(self, game_id: UUID) -> list[MemberResponse]:
        return [self._create_member_response(m) for m in self.repo.list_members(game_id)]

    def list_games_for_user(self, username: str) -> list[GameHeaderResponse]:
        user = self.users.get_user_by_name(username)
        if user is None:
            return []
        return [self._create_header_response(h) for h in self.repo.headers_for_user(user.id)]

    def get_game(self, game_id: UUID) -> GameHeaderResponse | None:
        header = self.repo.get_header(game_id)
        if header is None:
            return None
        return self._create_header_response(header)

    def list_users(self) -> list[UserResponse]:
        """Every known user. (Candidates for an invitation.)"""
        return [UserResponse(id=u.id, username=u.username) for u in self.users.list_users()]

    # -- Internal helpers --
    def _resolve_acting_user(self, username: str, game_id: UUID) -> UserModel:
        """An unknown user can't be a member of anything."""
        user = self.users.get_user_by_name(username)
        if user is None:
            raise NotAuthorizedError(f"Unknown user {username!r} may not change game {game_id}.")
        return user

    def _assert_member(self, acting: UserModel, game_id: UUID) -> None:
        roster = Roster.from_models(game_id, self.repo.list_members(game_id))
        roster.assert_member(acting.id)

    def _fetch_header(self, game_id: UUID) -> GameHeaderModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        header = self.repo.get_header(game_id)
        if header is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return header

    def _create_member_response(self, model: MemberModel) -> MemberResponse:
        return MemberResponse(
            id=model.id, username=model.username, role=model.role, accepted=model.accepted
        )

    def _create_header_response(self, model: GameHeaderModel) -> GameHeaderResponse:
        return GameHeaderResponse(
            game_id=model.id,
            owner=model.owner,
            description=model.description,
            members=[self._create_member_response(m) for m in model.members],
        )
