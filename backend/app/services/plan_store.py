"""Plan store — generated plans keyed by id, kept in Redis via the cache service."""

import logging
import uuid
from datetime import datetime, timezone

from app.services.cache_service import cache_service

logger = logging.getLogger(__name__)


def new_plan_id() -> str:
    return uuid.uuid4().hex[:16]


class PlanStore:
    """Best-effort persistence: failures are logged, never raised."""

    async def save(self, record: dict) -> str | None:
        """Persist a plan record. Returns its id, or None when the store is unavailable."""
        plan_id = record.get("id") or new_plan_id()
        record = {**record, "id": plan_id}
        record.setdefault("created_at", datetime.now(timezone.utc).isoformat())

        if not await cache_service.set_plan(plan_id, record):
            logger.warning(f"Plan {plan_id} not stored (store unavailable)")
            return None
        await cache_service.set_latest_plan_id(plan_id)
        logger.info(f"Stored plan {plan_id} ({record.get('mode')}, {record.get('provenance')})")
        return plan_id

    async def get(self, plan_id: str) -> dict | None:
        return await cache_service.get_plan(plan_id)

    async def latest(self) -> dict | None:
        plan_id = await cache_service.get_latest_plan_id()
        if not plan_id:
            return None
        return await self.get(plan_id)


plan_store = PlanStore()
