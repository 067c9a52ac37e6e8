"""Domain errors. Raising any of these aborts the current unit of work."""

from __future__ import annotations


class GameLibError(Exception):
    """Base class for domain errors mapped to HTTP responses."""

    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ConflictError(GameLibError):
    """Attempted duplicate creation, e.g. a second entry for the same (user, game)."""

    status_code = 409


class NotFoundError(GameLibError):
    """Target does not exist or is not visible to the caller."""

    status_code = 404


class ConsistencyError(GameLibError):
    """A derived aggregate violated its invariants after recomputation.

    Never expected in normal operation. Surfaces as a 500.
    """

    status_code = 500
