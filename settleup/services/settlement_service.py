from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from settleup.domain import (
    Card,
    CardAssignment,
    CardGameResult,
    DomainValidationError,
    HoleCategories,
    InvariantViolation,
    PayoutSettings,
    Player,
    apply_transactions,
    card_game_details,
    combine_nets,
    compute_fbt_game_net,
    compute_points_game_net,
    count_category_points,
    ensure_category_winners_known,
    ensure_known_players,
    hole_points_2916,
    segment_category_points,
    segment_hole_points,
    settle,
    sum_hole_points,
    to_cents,
    validate_card_assignment,
)
from settleup.storage.repository import SettlementRepository, SnapshotRow

GAME_CARDS = "cards"
GAME_POINTS = "points"
GAME_FBT = "fbt"
GAME_BBB_POINTS = "bbb-points"
GAME_BBB_FBT = "bbb-fbt"
SUPPORTED_GAMES = (GAME_CARDS, GAME_POINTS, GAME_FBT, GAME_BBB_POINTS, GAME_BBB_FBT)

UNKNOWN_PLAYER_NAME = "Unknown"

module_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CombinedGamesRequest:
    group_id: str
    players: tuple[Player, ...]
    selected_games: tuple[str, ...]
    settings: PayoutSettings = field(default_factory=PayoutSettings)
    card_history: tuple[CardAssignment, ...] = ()
    card_values: Mapping[str, Decimal] = field(default_factory=dict)
    deck: tuple[Card, ...] | None = None
    hole_points: Mapping[int, Mapping[str, Decimal]] = field(default_factory=dict)
    hole_strokes: Mapping[int, Mapping[str, Decimal]] = field(default_factory=dict)
    bbb_holes: Mapping[int, HoleCategories] = field(default_factory=dict)
    game_state_id: str | None = None
    points_game_id: str | None = None
    save_results: bool = False
    created_by: str | None = None


@dataclass(frozen=True)
class NamedTransaction:
    from_player: str
    from_name: str
    to_player: str
    to_name: str
    amount: Decimal


@dataclass
class SettlementReport:
    payouts: dict[str, Decimal]
    transactions: list[NamedTransaction]
    selected_games: list[str]
    card_game_details: CardGameResult | None = None
    saved_id: int | None = None

    def to_dict(self) -> dict[str, object]:
        details = None
        if self.card_game_details is not None:
            details = {
                "total_pot": float(self.card_game_details.total_pot),
                "payouts": [
                    {
                        "player_id": payout.player_id,
                        "player_name": payout.player_name,
                        "debt": float(payout.debt),
                        "net": float(payout.net),
                    }
                    for payout in self.card_game_details.payouts
                ],
            }
        return {
            "payouts": {player: float(amount) for player, amount in self.payouts.items()},
            "transactions": [
                {
                    "from": transaction.from_player,
                    "from_name": transaction.from_name,
                    "to": transaction.to_player,
                    "to_name": transaction.to_name,
                    "amount": float(transaction.amount),
                }
                for transaction in self.transactions
            ],
            "selected_games": list(self.selected_games),
            "total_transactions": len(self.transactions),
            "card_game_details": details,
            "saved_id": self.saved_id,
        }


class SettlementService:
    def __init__(self, repo: SettlementRepository | None = None, logger: logging.Logger | None = None) -> None:
        self.repo = repo
        self.logger = logger or module_logger

    def calculate(self, request: CombinedGamesRequest) -> SettlementReport:
        """Run the selected games through combine and settle; optionally cache the report."""
        self._validate(request)
        player_ids = [player.id for player in request.players]
        settings = request.settings

        nets: list[dict[str, Decimal]] = []
        active_games: list[str] = []
        details: CardGameResult | None = None

        if GAME_CARDS in request.selected_games and request.card_history:
            details = card_game_details(request.card_history, request.players, request.card_values)
            nets.append({payout.player_id: payout.net for payout in details.payouts})
            active_games.append(GAME_CARDS)

        hole_points = self._hole_points(request)
        if GAME_POINTS in request.selected_games and hole_points and settings.point_value > 0:
            totals = sum_hole_points(hole_points, player_ids)
            nets.append(compute_points_game_net(totals, settings.point_value))
            active_games.append(GAME_POINTS)

        if GAME_FBT in request.selected_games and hole_points and settings.fbt_value > 0:
            segments = segment_hole_points(hole_points, player_ids)
            nets.append(compute_fbt_game_net(segments.front, segments.back, segments.total, settings.fbt_value))
            active_games.append(GAME_FBT)

        if GAME_BBB_POINTS in request.selected_games and request.bbb_holes and settings.point_value > 0:
            totals = count_category_points(request.bbb_holes, player_ids)
            nets.append(compute_points_game_net(totals, settings.point_value))
            active_games.append(GAME_BBB_POINTS)

        if GAME_BBB_FBT in request.selected_games and request.bbb_holes and settings.fbt_value > 0:
            segments = segment_category_points(request.bbb_holes, player_ids)
            nets.append(compute_fbt_game_net(segments.front, segments.back, segments.total, settings.fbt_value))
            active_games.append(GAME_BBB_FBT)

        try:
            combined = combine_nets(nets)
            transactions = settle(combined)
            self._verify(combined, apply_transactions(transactions))
        except InvariantViolation as exc:
            self.logger.error(
                "settlement aborted",
                extra={
                    "group_id": request.group_id,
                    "selected_games": active_games,
                    "nets": [{player: str(amount) for player, amount in net.items()} for net in nets],
                    "violation": exc.context,
                },
            )
            raise

        names = {player.id: player.name for player in request.players}
        report = SettlementReport(
            payouts=combined,
            transactions=[
                NamedTransaction(
                    from_player=transaction.from_player,
                    from_name=names.get(transaction.from_player, UNKNOWN_PLAYER_NAME),
                    to_player=transaction.to_player,
                    to_name=names.get(transaction.to_player, UNKNOWN_PLAYER_NAME),
                    amount=transaction.amount,
                )
                for transaction in transactions
            ],
            selected_games=active_games,
            card_game_details=details,
        )
        self.logger.info(
            "settlement computed",
            extra={"group_id": request.group_id, "selected_games": active_games, "transactions": len(transactions)},
        )

        if request.save_results:
            report.saved_id = self._save(request, report)
        return report

    def get_snapshot(
        self,
        group_id: str,
        game_state_id: str | None = None,
        points_game_id: str | None = None,
    ) -> SnapshotRow | None:
        if self.repo is None:
            return None
        return self.repo.get_snapshot(group_id, game_state_id=game_state_id, points_game_id=points_game_id)

    def _validate(self, request: CombinedGamesRequest) -> None:
        if not request.selected_games:
            raise DomainValidationError("no games selected")
        unknown_games = sorted(set(request.selected_games) - set(SUPPORTED_GAMES))
        if unknown_games:
            raise DomainValidationError(f"unsupported games: {', '.join(unknown_games)}")

        player_ids = [player.id for player in request.players]
        if len(set(player_ids)) != len(player_ids):
            raise DomainValidationError("players must be unique")
        if request.hole_points and request.hole_strokes:
            raise DomainValidationError("send either hole points or hole strokes, not both")

        if request.deck is not None:
            for assignment in request.card_history:
                validate_card_assignment(assignment.card_id, assignment.player_id, request.deck, request.players)
        else:
            ensure_known_players((assignment.player_id for assignment in request.card_history), player_ids)

        for holes in (request.hole_points, request.hole_strokes):
            ensure_known_players((player for scores in holes.values() for player in scores), player_ids)
        ensure_category_winners_known(request.bbb_holes, player_ids)

    def _hole_points(self, request: CombinedGamesRequest) -> Mapping[int, Mapping[str, Decimal]]:
        if request.hole_points:
            return request.hole_points
        return {hole: hole_points_2916(strokes) for hole, strokes in request.hole_strokes.items()}

    def _verify(self, combined: Mapping[str, Decimal], replayed: Mapping[str, Decimal]) -> None:
        drift = {
            player: amount
            for player, amount in combined.items()
            if abs(to_cents(amount) - to_cents(replayed.get(player, 0))) > 1
        }
        if drift:
            raise InvariantViolation(
                "transactions do not reproduce the combined ledger",
                {"drift": {player: str(amount) for player, amount in drift.items()}},
            )

    def _save(self, request: CombinedGamesRequest, report: SettlementReport) -> int | None:
        if self.repo is None:
            self.logger.warning("save requested without a repository", extra={"group_id": request.group_id})
            return None
        return self.repo.save_snapshot(
            group_id=request.group_id,
            game_state_id=request.game_state_id,
            points_game_id=request.points_game_id,
            selected_games=report.selected_games,
            point_value=request.settings.point_value,
            fbt_value=request.settings.fbt_value,
            result=report.to_dict(),
            created_by=request.created_by,
        )
