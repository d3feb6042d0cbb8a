from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, DateTime, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from settleup.storage.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SettlementSnapshot(Base):
    """Cached result of a combined settlement; always recomputable from the game records."""

    __tablename__ = "settlement_snapshots"
    __table_args__ = (
        UniqueConstraint("group_id", "game_state_id", "points_game_id", name="uq_settlement_snapshots_scope"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    group_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    game_state_id: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    points_game_id: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    selected_games: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    point_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    fbt_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    result: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
