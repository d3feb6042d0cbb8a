from __future__ import annotations

from fastapi import APIRouter, Depends, status

from settleup.api.errors import api_error, domain_error
from settleup.api.schemas import (
    CardNetRequest,
    CombinedGamesRequestIn,
    FbtNetRequest,
    NetResponse,
    PointsNetRequest,
    SettlementReportOut,
    SettleRequest,
    SettleResponse,
    SnapshotOut,
)
from settleup.domain import (
    DomainValidationError,
    InvariantViolation,
    combine_nets,
    compute_card_game_net,
    compute_fbt_game_net,
    compute_points_game_net,
    settle,
)
from settleup.runtime import get_settlement_service
from settleup.services.settlement_service import SettlementService

router = APIRouter(prefix="/settlements", tags=["settlements"])


@router.post(
    "/calculate",
    response_model=SettlementReportOut,
    summary="Combine the selected games and compute who owes who",
)
def calculate_combined_games(
    payload: CombinedGamesRequestIn,
    service: SettlementService = Depends(get_settlement_service),
) -> dict:
    try:
        report = service.calculate(payload.to_domain())
    except (DomainValidationError, InvariantViolation) as exc:
        raise domain_error(exc) from exc
    return report.to_dict()


@router.get(
    "/{group_id}",
    response_model=SnapshotOut,
    summary="Last saved settlement for a group",
)
def get_saved_settlement(
    group_id: str,
    game_state_id: str | None = None,
    points_game_id: str | None = None,
    service: SettlementService = Depends(get_settlement_service),
) -> dict:
    snapshot = service.get_snapshot(group_id, game_state_id=game_state_id, points_game_id=points_game_id)
    if snapshot is None:
        raise api_error(
            code="snapshot_not_found",
            message="No saved settlement for this group",
            details={"group_id": group_id},
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return {
        "id": snapshot.id,
        "group_id": snapshot.group_id,
        "game_state_id": snapshot.game_state_id,
        "points_game_id": snapshot.points_game_id,
        "selected_games": snapshot.selected_games,
        "point_value": float(snapshot.point_value),
        "fbt_value": float(snapshot.fbt_value),
        "result": snapshot.result,
        "created_by": snapshot.created_by,
        "created_at": snapshot.created_at,
    }


@router.post("/net/cards", response_model=NetResponse, summary="Card game nets from debts")
def card_net(payload: CardNetRequest) -> NetResponse:
    net = compute_card_game_net(payload.debts)
    return NetResponse(net={player: float(amount) for player, amount in net.items()})


@router.post("/net/points", response_model=NetResponse, summary="Pairwise points game nets")
def points_net(payload: PointsNetRequest) -> NetResponse:
    try:
        net = compute_points_game_net(payload.scores, payload.rate_per_point)
    except DomainValidationError as exc:
        raise domain_error(exc) from exc
    return NetResponse(net={player: float(amount) for player, amount in net.items()})


@router.post("/net/fbt", response_model=NetResponse, summary="Front/back/total game nets")
def fbt_net(payload: FbtNetRequest) -> NetResponse:
    try:
        net = compute_fbt_game_net(payload.front, payload.back, payload.total, payload.pot_value)
    except DomainValidationError as exc:
        raise domain_error(exc) from exc
    return NetResponse(net={player: float(amount) for player, amount in net.items()})


@router.post("/settle", response_model=SettleResponse, summary="Who owes who for a net map")
def settle_net(payload: SettleRequest) -> dict:
    try:
        transactions = settle(combine_nets([payload.net]))
    except InvariantViolation as exc:
        raise domain_error(exc) from exc
    return {
        "transactions": [
            {"from": transaction.from_player, "to": transaction.to_player, "amount": float(transaction.amount)}
            for transaction in transactions
        ]
    }
