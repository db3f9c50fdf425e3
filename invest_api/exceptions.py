"""Domain errors raised by the services and mapped to HTTP responses in main."""

from __future__ import annotations


class AdvisoryError(Exception):
    """Base class for every error surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(AdvisoryError):
    """Unknown client, product or risk profile id."""

    status_code = 404


class InvalidInputError(AdvisoryError):
    """Missing or out-of-range input rejected before any computation."""

    status_code = 400


class AuthenticationError(AdvisoryError):
    status_code = 401
