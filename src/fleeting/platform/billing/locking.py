"""
Per-tenant serialization of entitlement mutations.

Quota checks must be atomic with the counter increment, and lazy expiry
must run once. Every read-evaluate-write sequence for a tenant runs while
holding that tenant's lock; different tenants never contend.

The in-process lock covers a single worker. Across workers the current
subscription and tenant rows are additionally read with ``SELECT ... FOR
UPDATE`` by the lifecycle service.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from fleeting.platform.billing.exceptions import TenantBusy
from fleeting.platform.settings import settings

logger = structlog.get_logger(__name__)


class _TenantSlot:
    """A tenant's lock and the number of tasks holding or waiting for it."""

    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class TenantLockManager:
    """``asyncio.Lock`` per tenant id, created on demand.

    A tenant's slot is dropped as soon as no task holds or waits for it, so
    the registry only ever contains tenants with work in flight.
    """

    def __init__(self, timeout: float | None = None):
        self._timeout = timeout
        self._slots: dict[str, _TenantSlot] = {}

    def __len__(self) -> int:
        return len(self._slots)

    @property
    def timeout(self) -> float:
        if self._timeout is not None:
            return self._timeout
        return settings.tenant.lock_timeout_seconds

    def is_held(self, tenant_id: str) -> bool:
        slot = self._slots.get(tenant_id)
        return slot is not None and slot.lock.locked()

    @asynccontextmanager
    async def hold(self, tenant_id: str) -> AsyncIterator[None]:
        """Hold the tenant's lock for the duration of the block.

        Raises:
            TenantBusy: If the lock is not acquired within the timeout
        """
        slot = self._slots.get(tenant_id)
        if slot is None:
            slot = self._slots[tenant_id] = _TenantSlot()
        slot.users += 1
        try:
            try:
                await asyncio.wait_for(slot.lock.acquire(), timeout=self.timeout)
            except TimeoutError as e:
                logger.warning("tenant_lock.timeout", tenant_id=tenant_id, timeout=self.timeout)
                raise TenantBusy(tenant_id, self.timeout) from e
            try:
                yield
            finally:
                slot.lock.release()
        finally:
            slot.users -= 1
            if slot.users == 0 and self._slots.get(tenant_id) is slot:
                del self._slots[tenant_id]


_lock_manager: TenantLockManager | None = None


def get_lock_manager() -> TenantLockManager:
    """Process-wide lock manager (FastAPI dependency)."""
    global _lock_manager
    if _lock_manager is None:
        _lock_manager = TenantLockManager()
    return _lock_manager


__all__ = ["TenantLockManager", "get_lock_manager"]
