"""
BillingCore HTTP API - Dependencies
=====================================
The store and engines a handler works against, injected per call.
"""

from __future__ import annotations

from dataclasses import dataclass

from engines.reporting.services import ReportingService
from engines.store.services import EntityStore


@dataclass(frozen=True)
class HttpApiDependencies:
    store: EntityStore
    reporting: ReportingService

    @classmethod
    def for_store(cls, store: EntityStore) -> HttpApiDependencies:
        return cls(store=store, reporting=ReportingService(store))
