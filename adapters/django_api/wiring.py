"""
BillingCore Django Adapter Wiring
===================================
Builds the EntityStore the HTTP views run against.

This module is adapter-only glue:
- store rules come from settings.BILLINGCORE_STORE
- the demo business is seeded when BILLINGCORE_SEED_DEMO_DATA is set
- one store per process, created lazily; tests call
  reset_dependencies() for a fresh one
"""

from __future__ import annotations

import logging
import threading

from django.conf import settings

from core.config.rules import StoreConfig
from core.http_api.dependencies import HttpApiDependencies
from core.time.clock import SystemClock
from engines.store.seed import load_demo_data
from engines.store.services import EntityStore

logger = logging.getLogger("billingcore.http")

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: HttpApiDependencies | None = None


def _store_config() -> StoreConfig:
    return StoreConfig.from_mapping(getattr(settings, "BILLINGCORE_STORE", {}))


def _create_dependencies() -> HttpApiDependencies:
    store = EntityStore(config=_store_config(), clock=SystemClock())
    if getattr(settings, "BILLINGCORE_SEED_DEMO_DATA", False):
        load_demo_data(store)
        logger.info(
            f"Demo data seeded: {len(store.products)} products, "
            f"{len(store.sales)} sales"
        )
    return HttpApiDependencies.for_store(store)


def build_dependencies() -> HttpApiDependencies:
    """
    Lazy per-process wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def reset_dependencies() -> None:
    """Drop the current store; the next request builds a new one."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = None
