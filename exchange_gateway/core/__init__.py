"""Core gateway components."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "ExchangeGateway",
    "create_gateway",
    "OPERATION_ROLES",
    "Role",
    "ExchangeRegistry",
    "register_exchange",
    "registered_exchanges",
    "TradingServiceResolver",
    "TradingServiceHandle",
    "OrderNormalizer",
    "OrderCapabilities",
    "CompatibilityShim",
    "ExchangeQuirks",
    "cancel_by_id",
    "default_cancel_params",
    "default_shim",
    "OrderNotifier",
    "GatewaySettings",
    "ExchangeConfiguration",
    "has_credentials",
    "configure_logging",
    "ExchangeGatewayError",
    "ConfigurationError",
    "UnknownExchangeError",
    "ValidationError",
    "UnsupportedOrderTypeError",
    "PairNotSupportedError",
    "BackendUnsupportedError",
    "OperationFailedError",
    "SubmissionFailedError",
    "ExchangeError",
    "ExchangeTransientError",
    "NotAvailableFromExchangeError",
]

_lazy_targets = {
    "ExchangeGateway": ("gateway", "ExchangeGateway"),
    "create_gateway": ("gateway", "create_gateway"),
    "OPERATION_ROLES": ("gateway", "OPERATION_ROLES"),
    "Role": ("gateway", "Role"),
    "ExchangeRegistry": ("registry", "ExchangeRegistry"),
    "register_exchange": ("registry", "register_exchange"),
    "registered_exchanges": ("registry", "registered_exchanges"),
    "TradingServiceResolver": ("resolver", "TradingServiceResolver"),
    "TradingServiceHandle": ("resolver", "TradingServiceHandle"),
    "OrderNormalizer": ("normalizer", "OrderNormalizer"),
    "OrderCapabilities": ("normalizer", "OrderCapabilities"),
    "CompatibilityShim": ("shims", "CompatibilityShim"),
    "ExchangeQuirks": ("shims", "ExchangeQuirks"),
    "cancel_by_id": ("shims", "cancel_by_id"),
    "default_cancel_params": ("shims", "default_cancel_params"),
    "default_shim": ("shims", "default_shim"),
    "OrderNotifier": ("notifier", "OrderNotifier"),
    "GatewaySettings": ("settings", "GatewaySettings"),
    "ExchangeConfiguration": ("settings", "ExchangeConfiguration"),
    "has_credentials": ("settings", "has_credentials"),
    "configure_logging": ("settings", "configure_logging"),
    "ExchangeGatewayError": ("errors", "ExchangeGatewayError"),
    "ConfigurationError": ("errors", "ConfigurationError"),
    "UnknownExchangeError": ("errors", "UnknownExchangeError"),
    "ValidationError": ("errors", "ValidationError"),
    "UnsupportedOrderTypeError": ("errors", "UnsupportedOrderTypeError"),
    "PairNotSupportedError": ("errors", "PairNotSupportedError"),
    "BackendUnsupportedError": ("errors", "BackendUnsupportedError"),
    "OperationFailedError": ("errors", "OperationFailedError"),
    "SubmissionFailedError": ("errors", "SubmissionFailedError"),
    "ExchangeError": ("errors", "ExchangeError"),
    "ExchangeTransientError": ("errors", "ExchangeTransientError"),
    "NotAvailableFromExchangeError": ("errors", "NotAvailableFromExchangeError"),
}


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _lazy_targets[name]
    except KeyError as exc:  # pragma: no cover - defensive
        raise AttributeError(f"module 'exchange_gateway.core' has no attribute {name!r}") from exc
    module = import_module(f"{__name__}.{module_name}")
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
