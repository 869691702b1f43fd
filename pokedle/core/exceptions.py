"""Errors raised by the reward and game services.

They subclass ``HTTPException`` so the API's exception handlers render them
directly, while scripts and tests can still catch them by type.
"""

from fastapi import HTTPException, status


class GameError(HTTPException):
    """Base class for game and reward errors."""

    default_status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(status_code=status_code or self.default_status_code, detail=detail)


class DataIntegrityError(GameError):
    """No card exists for a required pokemon even after every fallback."""


class PoolExhaustionError(GameError):
    """A tier, biome or the whole catalog has no eligible item left."""

    default_status_code = status.HTTP_409_CONFLICT


class ValidationError(GameError):
    """Malformed input or a reference to a missing or foreign resource."""

    default_status_code = status.HTTP_400_BAD_REQUEST
