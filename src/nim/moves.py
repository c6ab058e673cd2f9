"""A move: the set of token indices a player removes in one turn."""

from dataclasses import dataclass
from typing import Iterable, Self


@dataclass(frozen=True)
class NimMove:
    """
    Indices are kept as a frozenset: duplicates collapse and order does not matter.
    NOTE: nothing is validated here. Whether a move is legal depends on the game it is played in (see Nim.make_move).
    """

    token_indices: frozenset[int]

    @classmethod
    def from_indices(cls, indices: Iterable[int]) -> Self:
        return cls(frozenset(indices))

    def __len__(self) -> int:
        return len(self.token_indices)

    def to_list(self) -> list[int]:
        """Sorted list, for display and serialization."""
        return sorted(self.token_indices)
