from __future__ import annotations

from settleup.services.settlement_service import SettlementService
from settleup.storage.database import SessionLocal, init_db
from settleup.storage.repository import SettlementRepository

init_db()
repo = SettlementRepository(SessionLocal)
service = SettlementService(repo)


def get_settlement_service() -> SettlementService:
    return service
