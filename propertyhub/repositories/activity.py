"""Append-only activity log repository."""

from __future__ import annotations

from typing import Any

from propertyhub.domain.activity import ActivityLog
from propertyhub.repositories.base import BaseRepository


class ActivityLogRepository(BaseRepository[ActivityLog]):
    model = ActivityLog

    async def record(
        self,
        *,
        action: str,
        category: str = "system",
        user_id: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        details: str | None = None,
        metadata: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> ActivityLog:
        entry = ActivityLog(
            action=action,
            category=category,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            metadata_=metadata,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._session.add(entry)
        await self._session.flush()
        return entry

    async def by_action(
        self, action: str, *, offset: int, limit: int
    ) -> tuple[list[ActivityLog], int]:
        q = self._base_query().where(ActivityLog.action == action)
        return await self._paginate(
            q, offset=offset, limit=limit, order_by="created_at", order="desc"
        )
