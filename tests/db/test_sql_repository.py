"""Unit tests for src/db/sql_repository.py"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.exceptions import RoleDecodeError
from src.core.shared_types import Role, Status
from src.db.schema import DBGameHeader, DBMember
from src.db.sql_repository import (
    GameModel,
    MemberModel,
    SQLMembershipRepository,
    SQLNimGameRepository,
    SQLUserRepository,
    UserModel,
)


def new_game_model() -> GameModel:
    return GameModel(
        tokens=["present"] * 5,
        current_player=0,
        player_count=2,
        max_tokens_per_move=3,
        status=Status.IN_PROGRESS,
    )


# -- NIM GAMES --
def test_create_game(db_session_repo: Session) -> None:
    """Conversion from a GameModel to DBNimGame for a new entry to the database."""
    model = new_game_model()
    repo = SQLNimGameRepository(db_session_repo)
    record_in_db, _ = repo.create_game(model)
    assert isinstance(record_in_db, GameModel)
    assert record_in_db == model


def test_get_game_by_id(db_session_repo: Session) -> None:
    repo = SQLNimGameRepository(db_session_repo)
    expected_game, game_id = repo.create_game(new_game_model())
    assert repo.get_game(game_id) == expected_game


def test_get_unknown_game(db_session_repo: Session) -> None:
    """Should return None if ID does not match anything in database."""
    repo = SQLNimGameRepository(db_session_repo)
    assert repo.get_game(uuid4()) is None

    repo.create_game(new_game_model())
    assert repo.get_game(uuid4()) is None


def test_consecutive_game_updates(db_session_repo: Session) -> None:
    """Tests that we can successfully make multiple updates to the same game."""
    repo = SQLNimGameRepository(db_session_repo)
    _, game_id = repo.create_game(new_game_model())

    first_update = GameModel(
        tokens=["missing", "missing", "present", "present", "present"],
        current_player=1,
        player_count=2,
        max_tokens_per_move=3,
        status=Status.IN_PROGRESS,
    )
    assert repo.update_game(game_id, first_update) == first_update

    final_update = GameModel(
        tokens=["missing"] * 5,
        current_player=1,
        player_count=2,
        max_tokens_per_move=3,
        status=Status.FINISHED,
        winner=1,
    )
    assert repo.update_game(game_id, final_update) == final_update
    assert repo.get_game(game_id) == final_update


def test_update_unknown_game(db_session_repo: Session) -> None:
    repo = SQLNimGameRepository(db_session_repo)
    assert repo.update_game(uuid4(), new_game_model()) is None


# -- USERS --
def test_users(db_session_repo: Session) -> None:
    repo = SQLUserRepository(db_session_repo)
    bob = repo.add_user("bob")
    alice = repo.add_user("alice")
    assert repo.get_user_by_name("alice") == alice
    assert repo.get_user_by_name("nobody") is None
    assert repo.list_users() == [alice, bob]


def test_duplicate_username(db_session_repo: Session) -> None:
    repo = SQLUserRepository(db_session_repo)
    repo.add_user("alice")
    with pytest.raises(IntegrityError):
        repo.add_user("alice")


# -- HEADERS & MEMBERS --
def owner_of(user: UserModel) -> MemberModel:
    return MemberModel(id=user.id, username=user.username, role=Role.WHITE_PLAYER, accepted=True)


def test_header_with_members(db_session_repo: Session) -> None:
    users = SQLUserRepository(db_session_repo)
    alice = users.add_user("alice")
    carol = users.add_user("carol")
    repo = SQLMembershipRepository(db_session_repo)

    owner = owner_of(alice)
    header = repo.create_header(alice, "Friday night", owner)
    assert header.owner == "alice"
    assert header.description == "Friday night"
    assert header.members == [owner]

    invited = MemberModel(id=carol.id, username="carol", role=Role.WATCHER, accepted=False)
    assert repo.add_member(header.id, invited) == invited

    stored = repo.get_header(header.id)
    assert stored is not None
    assert stored.members == [owner, invited]
    assert repo.list_members(header.id) == [owner, invited]
    assert repo.get_member(header.id, carol.id) == invited


def test_failed_owner_entry_leaves_no_game(db_session_repo: Session) -> None:
    """Header and owner entry share one commit: a broken owner row takes the header down with it."""
    users = SQLUserRepository(db_session_repo)
    alice = users.add_user("alice")
    repo = SQLMembershipRepository(db_session_repo)

    broken_owner = MemberModel(id=None, username="alice", role=Role.WHITE_PLAYER, accepted=True)  # type: ignore[arg-type]
    with pytest.raises(IntegrityError):
        repo.create_header(alice, "half a game", broken_owner)

    assert db_session_repo.scalar(select(func.count()).select_from(DBGameHeader)) == 0
    assert db_session_repo.scalar(select(func.count()).select_from(DBMember)) == 0
    assert repo.headers_for_user(alice.id) == []

    # session is usable again
    header = repo.create_header(alice, "whole game", owner_of(alice))
    assert repo.list_members(header.id) == [owner_of(alice)]


def test_update_member_and_description(db_session_repo: Session) -> None:
    users = SQLUserRepository(db_session_repo)
    alice = users.add_user("alice")
    repo = SQLMembershipRepository(db_session_repo)
    header = repo.create_header(alice, "old", owner_of(alice))

    changed = MemberModel(alice.id, "alice", Role.BLACK_PLAYER, True)
    assert repo.update_member(header.id, changed) == changed
    assert repo.get_member(header.id, alice.id) == changed

    renamed = repo.update_description(header.id, "new")
    assert renamed is not None
    assert renamed.description == "new"
    assert renamed.members == [changed]


def test_missing_records(db_session_repo: Session) -> None:
    repo = SQLMembershipRepository(db_session_repo)
    unknown = uuid4()
    assert repo.get_header(unknown) is None
    assert repo.update_description(unknown, "x") is None
    assert repo.list_members(unknown) == []
    assert repo.get_member(unknown, 1) is None
    assert repo.update_member(unknown, MemberModel(1, "alice", Role.WATCHER, False)) is None
    assert repo.headers_for_user(1) == []


def test_duplicate_membership_is_refused(db_session_repo: Session) -> None:
    """The database itself refuses a second entry for the same (user, game)."""
    users = SQLUserRepository(db_session_repo)
    alice = users.add_user("alice")
    repo = SQLMembershipRepository(db_session_repo)
    header = repo.create_header(alice, "game", owner_of(alice))

    with pytest.raises(IntegrityError):
        repo.add_member(header.id, MemberModel(alice.id, "alice", Role.WATCHER, False))

    # session is usable again and still holds exactly one entry
    assert repo.list_members(header.id) == [owner_of(alice)]


def test_headers_for_user(db_session_repo: Session) -> None:
    users = SQLUserRepository(db_session_repo)
    alice = users.add_user("alice")
    bob = users.add_user("bob")
    repo = SQLMembershipRepository(db_session_repo)

    alice_game = repo.create_header(alice, "alice's", owner_of(alice))
    bob_game = repo.create_header(bob, "bob's", owner_of(bob))
    repo.add_member(bob_game.id, MemberModel(alice.id, "alice", Role.INVITED, False))

    assert {h.id for h in repo.headers_for_user(alice.id)} == {alice_game.id, bob_game.id}
    assert [h.id for h in repo.headers_for_user(bob.id)] == [bob_game.id]


def test_role_codes_in_database(db_session_repo: Session) -> None:
    """Roles are stored as integer codes. An unknown code is reported, not mapped to some default."""
    users = SQLUserRepository(db_session_repo)
    alice = users.add_user("alice")
    repo = SQLMembershipRepository(db_session_repo)
    header = repo.create_header(
        alice, "game", MemberModel(alice.id, "alice", Role.WATCHER, True)
    )

    stored_code = db_session_repo.scalar(select(DBMember.role))
    assert stored_code == 2

    db_session_repo.execute(update(DBMember).values(role=42))
    db_session_repo.commit()
    with pytest.raises(RoleDecodeError):
        repo.list_members(header.id)
