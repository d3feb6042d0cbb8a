from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from settleup.storage.models import SettlementSnapshot, utc_now


@dataclass(slots=True)
class SnapshotRow:
    id: int
    group_id: str
    game_state_id: str | None
    points_game_id: str | None
    selected_games: list[str]
    point_value: Decimal
    fbt_value: Decimal
    result: dict
    created_by: str | None
    created_at: str


class SettlementRepository:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def save_snapshot(
        self,
        *,
        group_id: str,
        game_state_id: str | None,
        points_game_id: str | None,
        selected_games: list[str],
        point_value: Decimal,
        fbt_value: Decimal,
        result: dict,
        created_by: str | None = None,
    ) -> int:
        """Store the snapshot for a group scope, replacing any earlier one."""
        with self._session_factory() as db:
            snapshot = db.scalars(
                select(SettlementSnapshot).where(
                    SettlementSnapshot.group_id == group_id,
                    SettlementSnapshot.game_state_id == (game_state_id or ""),
                    SettlementSnapshot.points_game_id == (points_game_id or ""),
                )
            ).first()
            if snapshot is None:
                snapshot = SettlementSnapshot(
                    group_id=group_id,
                    game_state_id=game_state_id or "",
                    points_game_id=points_game_id or "",
                )
                db.add(snapshot)

            snapshot.selected_games = list(selected_games)
            snapshot.point_value = point_value
            snapshot.fbt_value = fbt_value
            snapshot.result = result
            snapshot.created_by = created_by
            snapshot.created_at = utc_now()
            db.commit()
            return snapshot.id

    def get_snapshot(
        self,
        group_id: str,
        game_state_id: str | None = None,
        points_game_id: str | None = None,
    ) -> SnapshotRow | None:
        with self._session_factory() as db:
            query = select(SettlementSnapshot).where(SettlementSnapshot.group_id == group_id)
            if game_state_id is not None:
                query = query.where(SettlementSnapshot.game_state_id == game_state_id)
            if points_game_id is not None:
                query = query.where(SettlementSnapshot.points_game_id == points_game_id)
            snapshot = db.scalars(
                query.order_by(SettlementSnapshot.created_at.desc(), SettlementSnapshot.id.desc())
            ).first()
            if snapshot is None:
                return None

            return SnapshotRow(
                id=snapshot.id,
                group_id=snapshot.group_id,
                game_state_id=snapshot.game_state_id or None,
                points_game_id=snapshot.points_game_id or None,
                selected_games=list(snapshot.selected_games),
                point_value=Decimal(snapshot.point_value),
                fbt_value=Decimal(snapshot.fbt_value),
                result=dict(snapshot.result),
                created_by=snapshot.created_by,
                created_at=snapshot.created_at.isoformat(),
            )
