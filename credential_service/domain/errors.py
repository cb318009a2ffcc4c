"""
Credential Service Errors

Exceptions for failures that are not ordinary business outcomes.
Business outcomes (token not found, expired, ...) are returned as Result errors.
"""


class CredentialServiceError(Exception):
    """Base class for all credential service failures"""


class InvalidInput(CredentialServiceError):
    """Plaintext or token rejected before touching storage"""


class CorruptVerifier(CredentialServiceError):
    """Stored verifier cannot be parsed - data-integrity failure"""


class StoreUnavailable(CredentialServiceError):
    """Transaction or connection failure; safe to retry"""


class NotificationFailure(CredentialServiceError):
    """Reset notification could not be delivered"""
