"""Error kinds raised by the domain rules and the service layer.

Every error carries the HTTP status the API answers with, so routes can let
them propagate and the application maps them in one place.
"""

from __future__ import annotations


class RealmError(Exception):
    status_code: int = 400


class NotFoundError(RealmError):
    status_code = 404


class PermissionDeniedError(RealmError):
    status_code = 403


class AuthenticationError(RealmError):
    status_code = 401


class InvalidRequestError(RealmError):
    status_code = 400


class AlreadyExistsError(RealmError):
    status_code = 409


class EmailTakenError(AlreadyExistsError):
    pass


class InsufficientFundsError(RealmError):
    status_code = 402

    def __init__(self, shortfall: int, message: str | None = None):
        self.shortfall = shortfall
        super().__init__(message or f"Not enough gold ({shortfall} short)")


class OutOfStockError(RealmError):
    status_code = 409


# --- Teams ---


class AlreadyMemberError(RealmError):
    status_code = 409


class AlreadyInTeamError(RealmError):
    status_code = 409


class TeamFullError(RealmError):
    status_code = 400


class LeaderCannotLeaveError(RealmError):
    status_code = 400


class NotLeaderError(RealmError):
    status_code = 403


class NotAMemberError(RealmError):
    status_code = 404


# --- Missions ---


class AlreadyAcceptedError(RealmError):
    status_code = 409


class NotAcceptedError(RealmError):
    status_code = 400


class AlreadyCompletedError(RealmError):
    status_code = 409


# --- Storage ---


class TransientStoreError(RealmError):
    """The document store could not complete an operation."""

    status_code = 503
