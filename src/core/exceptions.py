"""
Custom exceptions shared by all layers.

Everything raised on purpose by this package derives from GameError, so callers can tell a rejected request apart from
a failing database (SQLAlchemy errors are never wrapped).
"""


class GameError(Exception):
    """Top-level exception of the application."""


# --- Game rules ---
class GameRuleError(GameError):
    """A move was rejected by the rules of the game. Retrying the same move can never succeed."""


class GameAlreadyOverError(GameRuleError):
    pass


class NotEnoughTokensError(GameRuleError):
    pass


class TooManyTokensError(GameRuleError):
    pass


class TokenOutOfBoundsError(GameRuleError):
    pass


class TokenAlreadyMissingError(GameRuleError):
    pass


# --- Membership ---
class MembershipError(GameError):
    """A roster request was rejected."""


class NotAuthorizedError(MembershipError):
    """Acting user is not a member of the game."""


class NoSuchMemberError(MembershipError):
    """User has no roster entry in the game."""


class UnknownUserError(MembershipError):
    """Username is not a known identity."""


# --- State / persistence / requests ---
class GameStateError(GameError):
    """Invalid state snapshot or invalid creation parameters."""


class RoleDecodeError(GameStateError):
    pass


class RepositoryError(GameError):
    """A record needed to carry out a request could not be found."""


class InvalidRequestError(GameError):
    """Request model failed validation. (Not a ValueError: pydantic lets it through unwrapped.)"""
