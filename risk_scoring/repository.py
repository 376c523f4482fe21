"""
Risk Scoring Engine - Repository.

============================================================
PURPOSE
============================================================
Repository for the monitoring audit trail.

Provides clean interface for:
- Saving monitoring results
- Querying recent snapshots
- Entity alert history

============================================================
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import select, desc, func
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AlertRecord, MonitoringSnapshot
from .types import MonitoringResult


class MonitoringRepository:
    """
    Repository for monitoring persistence operations.

    ============================================================
    METHODS
    ============================================================
    - save_result: Persist a complete monitoring result
    - get_latest_snapshot: Most recent snapshot for a catalog
    - get_entity_history: Alerts for one entity over time
    - get_level_distribution: Count of snapshots per level

    ============================================================
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    # --------------------------------------------------------
    # WRITE OPERATIONS
    # --------------------------------------------------------

    async def save_result(
        self,
        result: MonitoringResult,
        requested_entity: Optional[str] = None,
        engine_version: str = "1.0.0",
        include_raw_json: bool = False,
    ) -> MonitoringSnapshot:
        """
        Save a monitoring result with one AlertRecord per alert.

        Args:
            result: The MonitoringResult to persist
            requested_entity: Entity the caller asked about
            engine_version: Version tag stored with the snapshot
            include_raw_json: Whether to store full output as JSON

        Returns:
            Created MonitoringSnapshot (flushed, not committed)
        """
        snapshot = MonitoringSnapshot(
            catalog_id=result.catalog_id,
            overall_score=result.overall.value,
            national_risk_level=result.national_risk_level.value,
            triggered_indicators=list(result.overall.triggered_indicators),
            source_count=result.source_count,
            requested_entity=requested_entity,
            narrative=result.narrative,
            narrative_source=result.narrative_source,
            is_fallback=result.overall.is_zero,
            generated_at=result.generated_at,
            engine_version=engine_version,
            raw_output_json=result.to_dict() if include_raw_json else None,
        )

        for alert in result.alerts:
            snapshot.alerts.append(AlertRecord(
                entity_name=alert.entity_name,
                level=alert.level.value,
                score=alert.score,
                indicators=list(alert.indicators),
                sources=list(alert.sources),
                recommendations=list(alert.recommendations),
                alert_timestamp=alert.timestamp,
            ))

        self._session.add(snapshot)
        await self._session.flush()
        return snapshot

    # --------------------------------------------------------
    # READ OPERATIONS
    # --------------------------------------------------------

    async def get_latest_snapshot(self, catalog_id: str) -> Optional[MonitoringSnapshot]:
        stmt = (
            select(MonitoringSnapshot)
            .where(MonitoringSnapshot.catalog_id == catalog_id)
            .order_by(desc(MonitoringSnapshot.generated_at))
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_entity_history(
        self,
        entity_name: str,
        hours: int = 24,
        limit: int = 100,
    ) -> List[AlertRecord]:
        """
        Alerts recorded for an entity within a look-back window.

        Args:
            entity_name: Entity (or "NATIONAL")
            hours: Look-back window
            limit: Maximum records

        Returns:
            AlertRecords, newest first
        """
        since = datetime.now(timezone.utc) - timedelta(hours=hours)
        stmt = (
            select(AlertRecord)
            .where(
                AlertRecord.entity_name == entity_name,
                AlertRecord.alert_timestamp >= since,
            )
            .order_by(desc(AlertRecord.alert_timestamp))
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_level_distribution(
        self,
        catalog_id: str,
        hours: int = 24,
    ) -> Dict[str, int]:
        """Snapshot count per national risk level."""
        since = datetime.now(timezone.utc) - timedelta(hours=hours)
        stmt = (
            select(
                MonitoringSnapshot.national_risk_level,
                func.count(MonitoringSnapshot.id),
            )
            .where(
                MonitoringSnapshot.catalog_id == catalog_id,
                MonitoringSnapshot.generated_at >= since,
            )
            .group_by(MonitoringSnapshot.national_risk_level)
        )
        result = await self._session.execute(stmt)
        return {level: count for level, count in result.all()}
