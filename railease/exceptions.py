"""Exception hierarchy shared by the repositories, services and API."""


class RailLeaseError(Exception):
    """Base exception for all railease errors."""

    status_code = 500


class StoreNotConfigured(RailLeaseError):
    """Raised when an operation needs the relational store but none is configured."""


class UpstreamUnavailable(RailLeaseError):
    """Raised when the store cannot be reached, errors out, or times out."""


class RecordNotFound(RailLeaseError):
    """Raised when a referenced asset, application or lease does not exist."""

    status_code = 404


class InvalidTransition(RailLeaseError):
    """Raised when a record is in the wrong state for the requested change."""

    status_code = 409


class InvalidPayload(RailLeaseError):
    """Raised when a request body is well-formed JSON but not acceptable."""

    status_code = 400
