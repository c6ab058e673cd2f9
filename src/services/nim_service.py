"""Orchestration of communication from the API layer to the Nim game logic and persistence layers (and the reverse direction)."""

import logging
from typing import Optional
from uuid import UUID

from src.api.models import MoveRequest, NimCreateRequest, NimGameResponse
from src.core.config import Settings
from src.core.exceptions import RepositoryError
from src.core.locks import KeyedLock
from src.core.models import GameModel
from src.core.shared_types import Status, TokenState
from src.db.repository import NimGameRepository
from src.nim.game import Nim
from src.nim.moves import NimMove

logger = logging.getLogger(__name__)


class NimService:
    """Orchestration of layers for Nim games."""

    def __init__(
        self,
        repository: NimGameRepository,
        settings: Optional[Settings] = None,
        locks: Optional[KeyedLock] = None,
    ) -> None:
        self.repo = repository
        self.settings = settings or Settings()
        # One lock per game id: two moves on the same game never work on the same snapshot.
        self.locks = locks if locks is not None else KeyedLock()

    # -- API routes logic ---
    def create_game(self, request: NimCreateRequest) -> NimGameResponse:
        """Start a new game. Unset parameters come from the settings."""
        new_game = Nim.new_game(
            token_count=request.token_count or self.settings.default_token_count,
            player_count=request.player_count or self.settings.default_player_count,
            max_tokens_per_move=request.max_tokens_per_move
            or self.settings.max_tokens_per_move,
        )
        stored_game, game_id = self.repo.create_game(new_game.to_model())
        logger.info(
            "Created game %s: %d tokens, %d players",
            game_id,
            len(stored_game.tokens),
            stored_game.player_count,
        )
        return self._create_game_response(game_id, stored_game)

    def get_game_state(self, game_id: UUID) -> NimGameResponse | None:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check whose turn it is. Unknown games give None.
        """
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            return None
        return self._create_game_response(game_id, game_model)

    def make_move(self, request: MoveRequest) -> NimGameResponse:
        """Make a move attempt. Rule violations propagate and nothing gets stored."""
        move = NimMove.from_indices(request.token_indices)

        with self.locks.hold(request.game_id):
            # Retrieve persisted GameModel from repository
            stored_model = self._fetch_game(request.game_id)

            # Create a new Nim instance from the retrieved GameModel and attempt the move
            game = Nim.from_model(stored_model)
            mover = game.current_player
            game.make_move(move)

            # Capture updated state in GameModel and store in repository
            after_move = game.to_model()
            self.repo.update_game(request.game_id, after_move)

        logger.info(
            "Game %s: player %d took %s", request.game_id, mover, move.to_list()
        )
        if game.is_over:
            logger.info("Game %s finished, winner: player %d", request.game_id, game.winner)
        return self._create_game_response(request.game_id, after_move)

    # -- Internal helpers --
    def _create_game_response(self, game_id: UUID, model: GameModel) -> NimGameResponse:
        return NimGameResponse(
            game_id=game_id,
            tokens=[TokenState(token) for token in model.tokens],
            current_player=model.current_player,
            player_count=model.player_count,
            max_tokens_per_move=model.max_tokens_per_move,
            status=Status(model.status),
            winner=model.winner,
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model
