"""
Type definitions used across layers
"""

from enum import StrEnum

from src.core.exceptions import RoleDecodeError


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    FINISHED = "finished"


class TokenState(StrEnum):
    PRESENT = "present"
    MISSING = "missing"


class Role(StrEnum):
    WHITE_PLAYER = "white player"
    BLACK_PLAYER = "black player"
    WATCHER = "watcher"
    INVITED = "invited"


# Role is stored as an integer in the database. Keep both directions explicit so an unknown code never maps silently.
ROLE_TO_CODE: dict[Role, int] = {
    Role.WHITE_PLAYER: 0,
    Role.BLACK_PLAYER: 1,
    Role.WATCHER: 2,
    Role.INVITED: 3,
}

CODE_TO_ROLE: dict[int, Role] = {value: key for key, value in ROLE_TO_CODE.items()}


def encode_role(role: Role) -> int:
    return ROLE_TO_CODE[role]


def decode_role(code: int) -> Role:
    """Storage code -> Role. Unknown codes are an error, not a default."""
    if code not in CODE_TO_ROLE:
        raise RoleDecodeError(
            f"Unknown role code: {code!r}. \nPick one from {','.join(str(c) for c in CODE_TO_ROLE)}"
        )
    return CODE_TO_ROLE[code]
