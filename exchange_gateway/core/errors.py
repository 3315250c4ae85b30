"""Custom exception hierarchy for the exchange gateway."""

from __future__ import annotations


class ExchangeGatewayError(RuntimeError):
    """Base class for all domain-specific exceptions."""


class ConfigurationError(ExchangeGatewayError):
    """The process configuration cannot satisfy the request."""


class UnknownExchangeError(ConfigurationError):
    """Raised when an exchange identifier is not in the registry."""


class ValidationError(ExchangeGatewayError):
    """The request shape is malformed or unsupported; nothing was sent."""


class UnsupportedOrderTypeError(ValidationError):
    """The order type combination is not supported in general or by the exchange."""


class PairNotSupportedError(ValidationError):
    """Raised when an exchange does not list the requested pair."""


class BackendUnsupportedError(ExchangeGatewayError):
    """The exchange does not offer the requested capability."""


class OperationFailedError(ExchangeGatewayError):
    """The exchange attempted the call and it failed."""


class SubmissionFailedError(OperationFailedError):
    """An order submission failed on the exchange side."""


# Raised by connectors, translated by the gateway ---------------------------
class ExchangeError(ExchangeGatewayError):
    """An exchange-reported error raised from within a connector."""


class ExchangeTransientError(ExchangeError):
    """Represents temporary issues such as rate limiting or network failures."""


class NotAvailableFromExchangeError(ExchangeError):
    """The connector does not implement the requested call for this venue."""
