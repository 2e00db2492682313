"""Domain-level exception hierarchy for service and repository layers."""

from __future__ import annotations


class DomainError(Exception):
    """Base class for domain-specific failures."""


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""


class ConflictError(DomainError):
    """Raised when a state conflict occurs (e.g. duplicate entries)."""


class ValidationError(DomainError):
    """Raised when input validation fails at the domain/service layer."""


class InfrastructureError(DomainError):
    """Raised when infrastructure (DB or external service) is unavailable."""


class ConfigurationError(DomainError):
    """Raised when a required setting (e.g. an API credential) is missing."""


class UnauthorizedError(DomainError):
    """Raised when a maintenance call does not carry the shared secret."""


class InvalidArgumentError(ValidationError):
    """Coordinates out of range or a non-positive radius."""


class NoRouteFoundError(NotFoundError):
    """The distance provider answered but returned no usable distance."""


class ProviderUnavailableError(InfrastructureError):
    """The distance provider failed at the transport level or returned an error status."""


class StoreConflictError(ConflictError):
    """A uniqueness violation while inserting a cache row."""


class StoreUnavailableError(InfrastructureError):
    """The persisted store could not be reached."""
