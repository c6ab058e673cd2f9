"""
The Nim class is the entrypoint into the game domain for the service layer.
It holds the state of one game (tokens + whose turn it is) and enforces the rules of a single turn.
No I/O happens here: the service loads a GameModel, builds a Nim from it, plays the move and stores the result of to_model().
"""

from copy import deepcopy
from dataclasses import dataclass
from typing import Optional, Self

from src.core.exceptions import (
    GameAlreadyOverError,
    GameStateError,
    NotEnoughTokensError,
    TokenAlreadyMissingError,
    TokenOutOfBoundsError,
    TooManyTokensError,
)
from src.core.models import GameModel
from src.core.shared_types import Status, TokenState
from src.nim.moves import NimMove

DEFAULT_TOKEN_COUNT = 15
DEFAULT_PLAYER_COUNT = 2
MAX_TOKENS_PER_MOVE = 3


@dataclass
class Nim:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    tokens: list[TokenState]
    current_player: int
    player_count: int
    max_tokens_per_move: int = MAX_TOKENS_PER_MOVE
    winner: Optional[int] = None  # set to the player who took the last token

    @classmethod
    def new_game(
        cls,
        token_count: int = DEFAULT_TOKEN_COUNT,
        player_count: int = DEFAULT_PLAYER_COUNT,
        max_tokens_per_move: int = MAX_TOKENS_PER_MOVE,
    ) -> Self:
        """All tokens present, first player to move."""
        if token_count < 1:
            raise GameStateError(f"A game needs at least one token. {token_count=}")
        if player_count < 1:
            raise GameStateError(f"A game needs at least one player. {player_count=}")
        if max_tokens_per_move < 1:
            raise GameStateError(
                f"Players must be allowed to take at least one token. {max_tokens_per_move=}"
            )
        return cls(
            tokens=[TokenState.PRESENT] * token_count,
            current_player=0,
            player_count=player_count,
            max_tokens_per_move=max_tokens_per_move,
        )

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a Nim game from the information the Service layer actually has"""

        # Validation
        token_names = {state.value for state in TokenState}
        unknown = [name for name in model.tokens if name not in token_names]
        if unknown:
            raise GameStateError(
                f"Invalid token state(s): {unknown}. \nPick from {','.join(token_names)}"
            )
        if len(model.tokens) < 1 or model.player_count < 1 or model.max_tokens_per_move < 1:
            raise GameStateError(
                f"Token count, player count and move cap must all be positive. {model=}"
            )
        if not 0 <= model.current_player < model.player_count:
            raise GameStateError(
                f"Current player {model.current_player} outside of [0, {model.player_count})."
            )

        tokens = [TokenState(name) for name in model.tokens]
        all_missing = all(token == TokenState.MISSING for token in tokens)
        if (model.winner is not None) != all_missing:
            raise GameStateError(
                f"A winner must be set exactly when all tokens are gone. winner={model.winner}"
            )
        if model.winner is not None and not 0 <= model.winner < model.player_count:
            raise GameStateError(f"Winner {model.winner} is not one of the players.")

        game = cls(
            tokens=tokens,
            current_player=model.current_player,
            player_count=model.player_count,
            max_tokens_per_move=model.max_tokens_per_move,
            winner=model.winner,
        )
        if model.status != game.status:
            raise GameStateError(
                f"Status {model.status!r} does not match the tokens (expected {game.status.value!r})."
            )
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            tokens=[token.value for token in self.tokens],
            current_player=self.current_player,
            player_count=self.player_count,
            max_tokens_per_move=self.max_tokens_per_move,
            status=self.status.value,
            winner=self.winner,
        )

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    @property
    def status(self) -> Status:
        return Status.FINISHED if self.is_over else Status.IN_PROGRESS

    def remaining_tokens(self) -> list[int]:
        return [i for i, token in enumerate(self.tokens) if token == TokenState.PRESENT]

    def make_move(self, move: NimMove) -> None:
        """
        Attempt to make a move
        -----
        1. validate (nothing is changed if any check fails)
        2. remove the tokens
        3. either declare the mover the winner (took the last token) or pass the turn on
        """
        self._validate_move(move)

        for index in move.token_indices:
            self.tokens[index] = TokenState.MISSING

        if not self.remaining_tokens():
            self.winner = self.current_player
        else:
            self._next_player()

    # -- Internal helpers --
    def _validate_move(self, move: NimMove) -> None:
        """Checks are ordered: the first one failing decides the error."""
        if self.is_over:
            raise GameAlreadyOverError(
                f"Game is over. Player {self.winner} took the last token."
            )
        if len(move) == 0:
            raise NotEnoughTokensError("A move must take at least one token.")
        if len(move) > self.max_tokens_per_move:
            raise TooManyTokensError(
                f"A move may take at most {self.max_tokens_per_move} tokens, got {len(move)}."
            )
        out_of_bounds = [i for i in move.to_list() if not 0 <= i < len(self.tokens)]
        if out_of_bounds:
            raise TokenOutOfBoundsError(
                f"Token(s) {out_of_bounds} do not exist. Valid indices: 0-{len(self.tokens) - 1}."
            )
        already_missing = [
            i for i in move.to_list() if self.tokens[i] == TokenState.MISSING
        ]
        if already_missing:
            raise TokenAlreadyMissingError(f"Token(s) {already_missing} already taken.")

    def _next_player(self) -> None:
        self.current_player = (self.current_player + 1) % self.player_count


def apply_move(game: Nim, move: NimMove) -> Nim:
    """Pure variant of Nim.make_move: returns the game after the move, leaves the given game untouched."""
    after = deepcopy(game)
    after.make_move(move)
    return after
