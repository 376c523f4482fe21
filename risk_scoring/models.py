"""
Risk Scoring Engine - Persistence Layer.

============================================================
PURPOSE
============================================================
ORM models for the monitoring audit trail.

Enables:
- Historical tracking of national risk levels
- Analysis of entity alert patterns over time
- Audit trail of what each request returned

============================================================
MODELS
============================================================
1. MonitoringSnapshot: One assessed request
2. AlertRecord: Per-alert breakdown (child of MonitoringSnapshot)

============================================================
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    String,
    Integer,
    Float,
    Boolean,
    DateTime,
    Text,
    ForeignKey,
    Index,
    JSON,
)
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from database.engine import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# MONITORING SNAPSHOT MODEL
# ============================================================


class MonitoringSnapshot(Base):
    """
    One monitoring request as returned to the caller.

    ============================================================
    WHAT IT STORES
    ============================================================
    - Catalog and overall score
    - National risk level
    - Narrative and where it came from
    - Engine version for compatibility tracking

    ============================================================
    """

    __tablename__ = "monitoring_snapshots"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )

    catalog_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Indicator catalog the batch was scored against",
    )

    overall_score: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Overall score (0-1)",
    )

    national_risk_level: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Risk level: LOW, MEDIUM, HIGH, CRITICAL",
    )

    triggered_indicators: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    source_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    requested_entity: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    narrative: Mapped[str] = mapped_column(Text, nullable=False, default="")
    narrative_source: Mapped[str] = mapped_column(String(20), nullable=False, default="template")

    # True when fallback alerts were substituted
    is_fallback: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    engine_version: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="1.0.0",
    )

    raw_output_json: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
        comment="Full MonitoringResult as JSON",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    alerts: Mapped[List["AlertRecord"]] = relationship(
        "AlertRecord",
        back_populates="snapshot",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_monitoring_snapshots_generated_at", "generated_at"),
        Index("ix_monitoring_snapshots_catalog_level", "catalog_id", "national_risk_level"),
    )

    def __repr__(self) -> str:
        return (
            f"MonitoringSnapshot("
            f"id={self.id}, "
            f"catalog={self.catalog_id}, "
            f"level={self.national_risk_level}, "
            f"generated_at={self.generated_at})"
        )


# ============================================================
# ALERT RECORD MODEL
# ============================================================


class AlertRecord(Base):
    """One alert of a snapshot (entity or NATIONAL)."""

    __tablename__ = "alert_records"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )

    snapshot_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("monitoring_snapshots.id", ondelete="CASCADE"),
        nullable=False,
    )

    entity_name: Mapped[str] = mapped_column(String(100), nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)

    indicators: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    sources: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    recommendations: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    alert_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    snapshot: Mapped["MonitoringSnapshot"] = relationship(
        "MonitoringSnapshot",
        back_populates="alerts",
    )

    __table_args__ = (
        Index("ix_alert_records_entity_timestamp", "entity_name", "alert_timestamp"),
        Index("ix_alert_records_level", "level"),
    )

    def __repr__(self) -> str:
        return (
            f"AlertRecord("
            f"entity={self.entity_name}, "
            f"level={self.level}, "
            f"score={self.score})"
        )
