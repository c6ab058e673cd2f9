"""Implementation of the repositories using SQLAlchemy"""

import logging
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.models import GameHeaderModel, GameModel, MemberModel, UserModel
from src.core.shared_types import decode_role, encode_role
from src.db.schema import DBGameHeader, DBMember, DBNimGame, DBUser

logger = logging.getLogger(__name__)


class SQLNimGameRepository:
    """Nim game states stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        new_id = uuid4()
        game_db = DBNimGame(
            id=new_id,
            tokens=game.tokens,
            current_player=game.current_player,
            player_count=game.player_count,
            max_tokens_per_move=game.max_tokens_per_move,
            status=game.status,
            winner=game.winner,
        )
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Add new info to existing record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_db.tokens = list(game.tokens)
        game_db.current_player = game.current_player
        game_db.player_count = game.player_count
        game_db.max_tokens_per_move = game.max_tokens_per_move
        game_db.status = game.status
        game_db.winner = game.winner
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def _fetch_game(self, game_id: UUID) -> DBNimGame | None:
        query = select(DBNimGame).where(DBNimGame.id == game_id)
        return self.db.scalar(query)

    def _to_model(self, game_db: DBNimGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            tokens=list(game_db.tokens),
            current_player=game_db.current_player,
            player_count=game_db.player_count,
            max_tokens_per_move=game_db.max_tokens_per_move,
            status=game_db.status,
            winner=game_db.winner,
        )


class SQLMembershipRepository:
    """Game headers + rosters stored using SQL"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def create_header(
        self, owner: UserModel, description: str, owner_member: MemberModel
    ) -> GameHeaderModel:
        """Header and owner entry go in with one commit: if either insert fails, neither is stored."""
        owner_db = DBMember(
            user_id=owner_member.id,
            role=encode_role(owner_member.role),
            accepted=owner_member.accepted,
        )
        header_db = DBGameHeader(
            id=uuid4(), owner_id=owner.id, description=description, members=[owner_db]
        )
        self.db.add(header_db)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Rejected new game of owner %r", owner.username)
            raise
        self.db.refresh(header_db)
        return self._to_header_model(header_db)

    def get_header(self, game_id: UUID) -> GameHeaderModel | None:
        header_db = self._fetch_header(game_id)
        if header_db:
            return self._to_header_model(header_db)
        return None

    def update_description(self, game_id: UUID, description: str) -> GameHeaderModel | None:
        header_db = self._fetch_header(game_id)
        if not header_db:
            return None
        header_db.description = description
        self.db.commit()
        self.db.refresh(header_db)
        return self._to_header_model(header_db)

    def list_members(self, game_id: UUID) -> list[MemberModel]:
        query = select(DBMember).where(DBMember.game_id == game_id).order_by(DBMember.id)
        return [self._to_member_model(member_db) for member_db in self.db.scalars(query)]

    def get_member(self, game_id: UUID, user_id: int) -> MemberModel | None:
        member_db = self._fetch_member(game_id, user_id)
        if member_db:
            return self._to_member_model(member_db)
        return None

    def add_member(self, game_id: UUID, member: MemberModel) -> MemberModel:
        """Insert a roster entry. A duplicate (user, game) pair violates uq_members_game_user and is re-raised as is."""
        member_db = DBMember(
            game_id=game_id,
            user_id=member.id,
            role=encode_role(member.role),
            accepted=member.accepted,
        )
        self.db.add(member_db)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                "Rejected duplicate membership user_id=%s game_id=%s", member.id, game_id
            )
            raise
        self.db.refresh(member_db)
        return self._to_member_model(member_db)

    def update_member(self, game_id: UUID, member: MemberModel) -> MemberModel | None:
        member_db = self._fetch_member(game_id, member.id)
        if not member_db:
            return None
        member_db.role = encode_role(member.role)
        member_db.accepted = member.accepted
        self.db.commit()
        self.db.refresh(member_db)
        return self._to_member_model(member_db)

    def headers_for_user(self, user_id: int) -> list[GameHeaderModel]:
        query = (
            select(DBGameHeader)
            .join(DBMember, DBMember.game_id == DBGameHeader.id)
            .where(DBMember.user_id == user_id)
            .order_by(DBGameHeader.created_at)
        )
        return [self._to_header_model(header_db) for header_db in self.db.scalars(query)]

    def _fetch_header(self, game_id: UUID) -> DBGameHeader | None:
        query = select(DBGameHeader).where(DBGameHeader.id == game_id)
        return self.db.scalar(query)

    def _fetch_member(self, game_id: UUID, user_id: int) -> DBMember | None:
        query = select(DBMember).where(
            DBMember.game_id == game_id, DBMember.user_id == user_id
        )
        return self.db.scalar(query)

    def _to_member_model(self, member_db: DBMember) -> MemberModel:
        """Convert SQLAlchemy model to data transfer model. The role code is decoded here, unknown codes raise."""
        return MemberModel(
            id=member_db.user_id,
            username=member_db.user.username,
            role=decode_role(member_db.role),
            accepted=member_db.accepted,
        )

    def _to_header_model(self, header_db: DBGameHeader) -> GameHeaderModel:
        return GameHeaderModel(
            id=header_db.id,
            owner=header_db.owner.username,
            description=header_db.description,
            members=[self._to_member_model(member_db) for member_db in header_db.members],
        )


class SQLUserRepository:
    """User directory stored using SQL"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_user_by_name(self, username: str) -> UserModel | None:
        query = select(DBUser).where(DBUser.username == username)
        user_db = self.db.scalar(query)
        if user_db:
            return UserModel(id=user_db.id, username=user_db.username)
        return None

    def list_users(self) -> list[UserModel]:
        query = select(DBUser).order_by(DBUser.username)
        return [UserModel(id=user_db.id, username=user_db.username) for user_db in self.db.scalars(query)]

    def add_user(self, username: str) -> UserModel:
        user_db = DBUser(username=username)
        self.db.add(user_db)
        self.db.commit()
        self.db.refresh(user_db)
        return UserModel(id=user_db.id, username=user_db.username)
