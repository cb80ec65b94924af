"""Exceptions for the URL shortener service layer.

This module contains the exception hierarchy for the service layer,
providing domain-specific exceptions that abstract underlying implementation details.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    retryable = False


class URLError(ServiceError):
    """Base exception for URL-related errors."""
    pass


class URLCreationError(URLError):
    """Error occurred during URL creation."""
    pass


class ShortCodeAlreadyExistsError(URLCreationError):
    """The short code is already taken in the durable store."""
    pass


class ShortCodeGenerationError(URLCreationError):
    """Every generation attempt hit the collision filter.

    The caller may simply try again later.
    """
    retryable = True


class InvalidExpirationError(URLCreationError):
    """The requested expiration is not in the future."""
    pass


class URLUnavailableError(URLError):
    """The short code does not resolve to a URL."""
    pass


class URLNotFoundError(URLUnavailableError):
    """URL with the specified short code was not found."""
    pass


class URLExpiredError(URLUnavailableError):
    """URL has expired and is no longer valid."""
    pass
