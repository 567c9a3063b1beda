"""
Per-contract mutex shared by every process serving the API.

Create/approve/reject and tutor reassignment all mutate state owned by one
contract, so they serialize on ``contract:<id>:mutex`` in Redis. The lock
fails open when Redis cannot be reached; row locks taken inside the database
transaction still hold in that case.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
import time
from typing import Iterator, Optional

from redis import Redis

from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings
from .exceptions import ContractLockedException

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()


def _lock_key(contract_id: str) -> str:
    return f"contract:{contract_id}:mutex"


def _namespaced_key(key: str) -> str:
    return f"{settings.lock_namespace}:lock:{key}"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=1,
            )
            client.ping()
        except Exception as exc:
            logger.warning("contract_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def reset_lock_client() -> None:
    """Drop the cached Redis client (used after settings change and in tests)."""
    global _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        _SYNC_REDIS = None


def acquire_contract_lock(contract_id: str, ttl_s: Optional[int] = None) -> bool:
    if not settings.contract_locks_enabled:
        return True
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_contract_lock("acquire", "redis_unavailable")
        logger.warning(
            "contract_lock_redis_unavailable",
            extra={"contract_id": contract_id},
        )
        return True
    ttl = ttl_s or settings.contract_lock_ttl_seconds
    try:
        acquired = bool(
            client.set(_namespaced_key(_lock_key(contract_id)), str(time.time()), nx=True, ex=ttl)
        )
        if acquired:
            prometheus_metrics.record_contract_lock("acquire", "success")
        else:
            prometheus_metrics.record_contract_lock("acquire", "blocked")
        return acquired
    except Exception as exc:
        prometheus_metrics.record_contract_lock("acquire", "error")
        logger.warning(
            "contract_lock_acquire_failed",
            extra={
                "contract_id": contract_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
        return True


def release_contract_lock(contract_id: str) -> None:
    if not settings.contract_locks_enabled:
        return
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_contract_lock("release", "redis_unavailable")
        return
    try:
        deleted = client.delete(_namespaced_key(_lock_key(contract_id)))
        if deleted:
            prometheus_metrics.record_contract_lock("release", "success")
        else:
            prometheus_metrics.record_contract_lock("release", "not_found")
    except Exception as exc:
        prometheus_metrics.record_contract_lock("release", "error")
        logger.warning(
            "contract_lock_release_failed",
            extra={
                "contract_id": contract_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )


@contextmanager
def contract_lock(contract_id: str, ttl_s: Optional[int] = None) -> Iterator[bool]:
    acquired = acquire_contract_lock(contract_id, ttl_s=ttl_s)
    try:
        yield acquired
    finally:
        if acquired:
            release_contract_lock(contract_id)


@contextmanager
def exclusive_contract(contract_id: str, ttl_s: Optional[int] = None) -> Iterator[None]:
    """Hold the contract mutex for the block or raise ContractLockedException."""
    with contract_lock(contract_id, ttl_s=ttl_s) as acquired:
        if not acquired:
            logger.info("contract_lock_contended", extra={"contract_id": contract_id})
            raise ContractLockedException(contract_id)
        yield
