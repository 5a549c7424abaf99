from __future__ import annotations

from typing import Optional


class GreenCreditsError(Exception):
    """Base class for errors raised by the reward and reporting services."""


class ValidationError(GreenCreditsError, ValueError):
    pass


class NotFoundError(GreenCreditsError, LookupError):
    def __init__(self, entity: str, key: object):
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


class InsufficientCredits(GreenCreditsError):
    def __init__(self, available: int, cost: int):
        super().__init__(f"Insufficient credits: {available} available, {cost} required")
        self.available = available
        self.cost = cost


class InvalidTransition(GreenCreditsError, ValueError):
    pass


class SubmissionFailed(GreenCreditsError):
    """
    The submission could not be completed.

    When ``report_id`` is set the report itself was stored and only the reward
    side effects are outstanding; the reconciler applies them later.
    """

    def __init__(self, message: str, report_id: Optional[int] = None):
        super().__init__(message)
        self.report_id = report_id

    @property
    def partial(self) -> bool:
        return self.report_id is not None


class AlreadyExists(GreenCreditsError):
    pass


class AuthenticationError(GreenCreditsError):
    pass


class PermissionDenied(GreenCreditsError):
    pass
