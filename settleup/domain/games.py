"""Per-game net calculators.

Each calculator maps raw per-player game data to a net-dollar map that sums to
exactly zero in cents.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from itertools import combinations

from .errors import DomainValidationError
from .money import as_decimal, from_cents_map, reconcile_pennies, to_cents
from .records import CardAssignment, HoleCategories, Player, SegmentTotals, resolve_card_value, unique_preserve_order

logger = logging.getLogger(__name__)

FRONT_NINE_LAST_HOLE = 9

# Points per stroke group, lowest strokes first, keyed by the size of each group.
_POINTS_2916: dict[tuple[int, ...], tuple[Decimal, ...]] = {
    (2,): (Decimal("1"),),
    (1, 1): (Decimal("2"), Decimal("0")),
    (3,): (Decimal("3"),),
    (2, 1): (Decimal("4"), Decimal("1")),
    (1, 2): (Decimal("5"), Decimal("2")),
    (1, 1, 1): (Decimal("5"), Decimal("3"), Decimal("1")),
    (4,): (Decimal("4"),),
    (3, 1): (Decimal("5"), Decimal("1")),
    (2, 2): (Decimal("5"), Decimal("3")),
    (1, 3): (Decimal("7"), Decimal("3")),
    (2, 1, 1): (Decimal("6"), Decimal("3"), Decimal("1")),
    (1, 2, 1): (Decimal("7"), Decimal("4"), Decimal("1")),
    (1, 1, 2): (Decimal("8"), Decimal("5"), Decimal("1.5")),
    (1, 1, 1, 1): (Decimal("7"), Decimal("5"), Decimal("3"), Decimal("1")),
}
_FRACTIONAL_2916_PATTERN = (1, 1, 2)


@dataclass(frozen=True)
class CardPayout:
    player_id: str
    player_name: str
    debt: Decimal
    net: Decimal


@dataclass(frozen=True)
class CardGameResult:
    total_pot: Decimal
    payouts: list[CardPayout]


def compute_card_game_net(debts: Mapping[str, Decimal]) -> dict[str, Decimal]:
    """Excess-over-minimum card game.

    Players holding the minimum debt split everybody else's excess evenly;
    everybody else pays exactly their excess over the minimum.
    """
    players = list(debts)
    if not players:
        return {}

    values = {player: as_decimal(debts[player]) for player in players}
    min_debt = min(values.values())
    excess = {player: max(values[player] - min_debt, Decimal("0")) for player in players}
    total_excess = sum(excess.values(), Decimal("0"))
    baseline = [player for player in players if values[player] == min_debt]
    share = total_excess / len(baseline)

    net_cents = {
        player: to_cents(share) if values[player] == min_debt else -to_cents(excess[player])
        for player in players
    }
    net_cents = reconcile_pennies(net_cents, baseline[-1])

    logger.debug(
        "card game net computed",
        extra={
            "debts": {player: str(value) for player, value in values.items()},
            "min_debt": str(min_debt),
            "total_excess": str(total_excess),
            "baseline": baseline,
        },
    )
    return from_cents_map(net_cents)


def compute_points_game_net(scores: Mapping[str, Decimal], rate_per_point: Decimal) -> dict[str, Decimal]:
    """Pairwise difference game: for every pair the higher score collects the gap times the rate."""
    rate = as_decimal(rate_per_point)
    if rate < 0:
        raise DomainValidationError("rate per point must not be negative")

    values = {player: as_decimal(score) for player, score in scores.items()}
    net = {player: Decimal("0") for player in values}
    for first, second in combinations(values, 2):
        transfer = (values[first] - values[second]) * rate
        net[first] += transfer
        net[second] -= transfer

    if not net:
        return {}
    net_cents = {player: to_cents(amount) for player, amount in net.items()}
    # ties on magnitude resolve by player id so the result ignores input order
    target = max(net, key=lambda player: (abs(net[player]), player))
    reconciled = reconcile_pennies(net_cents, target)
    if reconciled[target] != net_cents[target]:
        logger.debug(
            "points game net reconciled",
            extra={"player": target, "adjustment": reconciled[target] - net_cents[target]},
        )
    return from_cents_map(reconciled)


def compute_fbt_game_net(
    front: Mapping[str, Decimal],
    back: Mapping[str, Decimal],
    total: Mapping[str, Decimal],
    pot_value: Decimal,
) -> dict[str, Decimal]:
    """Front/back/total pots: in each segment the top scorers collect the pot from the rest."""
    pot_cents = to_cents(pot_value)
    if pot_cents < 0:
        raise DomainValidationError("pot value must not be negative")

    players = unique_preserve_order([*front, *back, *total])
    net_cents = {player: 0 for player in players}

    for name, segment in (("front", front), ("back", back), ("total", total)):
        if not segment:
            continue
        scores = {player: as_decimal(score) for player, score in segment.items()}
        best = max(scores.values())
        winners = [player for player, score in scores.items() if score == best]
        losers = [player for player, score in scores.items() if score != best]
        if not losers:
            logger.debug("fbt segment tied, skipped", extra={"segment": name})
            continue

        for player, amount in _split_cents(pot_cents, winners).items():
            net_cents[player] += amount
        for player, amount in _split_cents(pot_cents, losers).items():
            net_cents[player] -= amount

    return from_cents_map(net_cents)


def _split_cents(total_cents: int, recipients: Sequence[str]) -> dict[str, int]:
    share, remainder = divmod(total_cents, len(recipients))
    return {player: share + (1 if idx < remainder else 0) for idx, player in enumerate(recipients)}


def hole_points_2916(strokes: Mapping[str, Decimal | int]) -> dict[str, Decimal]:
    """2/9/16 points for one hole; fewer strokes earn more points.

    The tables sum to 2, 9 and 16 points for two, three and four players.
    Other group sizes score nothing.
    """
    groups: dict[Decimal, list[str]] = {}
    for player, stroke in strokes.items():
        groups.setdefault(as_decimal(stroke), []).append(player)
    ordered = [groups[stroke] for stroke in sorted(groups)]
    pattern = tuple(len(group) for group in ordered)

    points = {player: Decimal("0") for player in strokes}
    table = _POINTS_2916.get(pattern)
    if table is None:
        if strokes:
            logger.warning("2/9/16 points need 2 to 4 players", extra={"players": len(strokes)})
        return points

    if pattern == _FRACTIONAL_2916_PATTERN:
        # 8/5/1.5 is the only fractional row; kept until the rules owner confirms it
        logger.warning(
            "2/9/16 split-high case awarded fractional points",
            extra={"strokes": {player: str(stroke) for player, stroke in strokes.items()}},
        )

    for group, value in zip(ordered, table):
        for player in group:
            points[player] = value
    return points


def sum_hole_points(holes: Mapping[int, Mapping[str, Decimal]], player_ids: Sequence[str]) -> dict[str, Decimal]:
    totals = {player: Decimal("0") for player in player_ids}
    for hole_points in holes.values():
        for player in totals:
            totals[player] += as_decimal(hole_points.get(player, 0))
    return totals


def segment_hole_points(holes: Mapping[int, Mapping[str, Decimal]], player_ids: Sequence[str]) -> SegmentTotals:
    segments = _empty_segments(player_ids)
    for hole, hole_points in holes.items():
        bucket = segments.front if int(hole) <= FRONT_NINE_LAST_HOLE else segments.back
        for player in segments.total:
            points = as_decimal(hole_points.get(player, 0))
            bucket[player] += points
            segments.total[player] += points
    return segments


def count_category_points(holes: Mapping[int, HoleCategories], player_ids: Sequence[str]) -> dict[str, Decimal]:
    """One point per BBB category won; 'none' and unknown players score nothing."""
    return segment_category_points(holes, player_ids).total


def segment_category_points(holes: Mapping[int, HoleCategories], player_ids: Sequence[str]) -> SegmentTotals:
    segments = _empty_segments(player_ids)
    for hole, categories in holes.items():
        bucket = segments.front if int(hole) <= FRONT_NINE_LAST_HOLE else segments.back
        for winner in categories.winners():
            if winner not in segments.total:
                continue
            bucket[winner] += 1
            segments.total[winner] += 1
    return segments


def _empty_segments(player_ids: Sequence[str]) -> SegmentTotals:
    return SegmentTotals(
        front={player: Decimal("0") for player in player_ids},
        back={player: Decimal("0") for player in player_ids},
        total={player: Decimal("0") for player in player_ids},
    )


def card_debts_from_history(
    history: Sequence[CardAssignment],
    player_ids: Sequence[str],
    card_values: Mapping[str, Decimal] | None = None,
) -> dict[str, Decimal]:
    """Debt per player from the card history; only the latest holder of each card pays for it."""
    latest: dict[str, CardAssignment] = {}
    for assignment in history:
        latest[assignment.card_id] = assignment

    debts = {player: Decimal("0") for player in player_ids}
    for assignment in latest.values():
        if assignment.player_id not in debts:
            continue
        debts[assignment.player_id] += resolve_card_value(assignment.kind, card_values, assignment.card_value)
    return debts


def card_game_details(
    history: Sequence[CardAssignment],
    players: Sequence[Player],
    card_values: Mapping[str, Decimal] | None = None,
) -> CardGameResult:
    debts = card_debts_from_history(history, [player.id for player in players], card_values)
    net = compute_card_game_net(debts)
    return CardGameResult(
        total_pot=sum(debts.values(), Decimal("0")),
        payouts=[
            CardPayout(
                player_id=player.id,
                player_name=player.name,
                debt=debts.get(player.id, Decimal("0")),
                net=net.get(player.id, Decimal("0.00")),
            )
            for player in players
        ],
    )
