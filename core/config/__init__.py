"""
BillingCore Config — Public API
==================================
Configurable store rules (currency, rounding, tolerance).
"""

from core.config.rules import DEFAULT_STORE_CONFIG, StoreConfig

__all__ = [
    "StoreConfig",
    "DEFAULT_STORE_CONFIG",
]
