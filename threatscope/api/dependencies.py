"""
FastAPI Dependencies — Shared singletons injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from threatscope.audit.logger import AuditLogger
from threatscope.cache.lookup_cache import LookupCache
from threatscope.config import settings
from threatscope.core.engine import AssessmentEngine
from threatscope.profiles import contract, social, transaction


@lru_cache
def get_lookup_cache() -> LookupCache:
    """Shared identity lookup cache singleton."""
    return LookupCache(
        capacity=settings.lookup_cache_capacity,
        ttl_seconds=settings.lookup_cache_ttl_seconds,
    )


@lru_cache
def get_audit_logger() -> AuditLogger | None:
    """Shared audit logger singleton, or None when auditing is off."""
    if not settings.audit_enabled:
        return None
    return AuditLogger()


@lru_cache
def get_transaction_engine() -> AssessmentEngine:
    return transaction.build_engine(settings, cache=get_lookup_cache())


@lru_cache
def get_contract_engine() -> AssessmentEngine:
    return contract.build_engine(settings)


@lru_cache
def get_social_engine() -> AssessmentEngine:
    return social.build_engine(settings)
