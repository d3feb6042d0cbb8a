"""Ledger combination and who-owes-who settlement."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal

from .errors import InvariantViolation
from .money import as_decimal, from_cents, from_cents_map, reconcile_pennies, to_cents, to_cents_map
from .records import Transaction

logger = logging.getLogger(__name__)

# Combined residuals strictly below this bound are rounding noise; anything larger is an upstream bug.
COMBINE_TOLERANCE_CENTS = 2


def combine_nets(nets: Sequence[Mapping[str, Decimal]]) -> dict[str, Decimal]:
    """Merge per-game nets by player id and force the result to sum to zero."""
    combined: dict[str, int] = {}
    for net in nets:
        for player, amount in net.items():
            combined[player] = combined.get(player, 0) + to_cents(amount)

    imbalance = sum(combined.values())
    if abs(imbalance) >= COMBINE_TOLERANCE_CENTS:
        context = {
            "imbalance": str(from_cents(imbalance)),
            "combined": {player: str(from_cents(amount)) for player, amount in combined.items()},
            "nets": [
                {
                    "index": idx,
                    "net": {player: str(amount) for player, amount in net.items()},
                    "sum": str(sum((as_decimal(amount) for amount in net.values()), Decimal("0"))),
                }
                for idx, net in enumerate(nets)
            ],
        }
        logger.error("combined nets are not zero-sum", extra=context)
        raise InvariantViolation(f"combined nets not zero-sum (got {from_cents(imbalance)})", context)

    if imbalance:
        target = max(combined, key=lambda player: abs(combined[player]))
        combined = reconcile_pennies(combined, target)
        logger.info(
            "penny reconciliation applied to combined nets",
            extra={"player": target, "adjustment": str(from_cents(-imbalance))},
        )

    return from_cents_map(combined)


def settle(net: Mapping[str, Decimal]) -> list[Transaction]:
    """Greedy who-owes-who: the largest debtor pays the largest creditor until both sides clear.

    Equal balances keep the order of `net`. Legs below one cent are never produced.
    """
    cents = to_cents_map(net)
    imbalance = sum(cents.values())
    if imbalance:
        exact = sum((as_decimal(amount) for amount in net.values()), Decimal("0"))
        if to_cents(exact) != 0:
            context = {
                "net": {player: str(amount) for player, amount in net.items()},
                "imbalance": str(exact),
            }
            logger.error("settlement input is not zero-sum", extra=context)
            raise InvariantViolation(f"settlement input not zero-sum (got {exact})", context)
        # sub-cent inputs that rounded apart
        target = max(cents, key=lambda player: abs(cents[player]))
        cents = reconcile_pennies(cents, target)
        logger.warning(
            "penny reconciliation applied to settlement input",
            extra={"player": target, "adjustment": str(from_cents(-imbalance))},
        )

    payers = sorted(
        ((player, -amount) for player, amount in cents.items() if amount < 0),
        key=lambda item: item[1],
        reverse=True,
    )
    receivers = sorted(
        ((player, amount) for player, amount in cents.items() if amount > 0),
        key=lambda item: item[1],
        reverse=True,
    )

    legs: list[tuple[str, str, int]] = []
    payer_idx = 0
    receiver_idx = 0
    while payer_idx < len(payers) and receiver_idx < len(receivers):
        payer_name, owed = payers[payer_idx]
        receiver_name, due = receivers[receiver_idx]

        amount = min(owed, due)
        legs.append((payer_name, receiver_name, amount))

        owed -= amount
        due -= amount
        payers[payer_idx] = (payer_name, owed)
        receivers[receiver_idx] = (receiver_name, due)

        if owed == 0:
            payer_idx += 1
        if due == 0:
            receiver_idx += 1

    unmatched = sum(amount for _, amount in payers[payer_idx:]) + sum(amount for _, amount in receivers[receiver_idx:])
    if unmatched:
        context = {
            "net": {player: str(amount) for player, amount in net.items()},
            "unmatched": str(from_cents(unmatched)),
        }
        logger.error("settlement left unmatched balance", extra=context)
        raise InvariantViolation(f"settlement left {from_cents(unmatched)} unmatched", context)

    return [
        Transaction(from_player=payer, to_player=receiver, amount=from_cents(amount))
        for payer, receiver, amount in legs
    ]


def apply_transactions(transactions: Sequence[Transaction]) -> dict[str, Decimal]:
    """Replay transactions into the net map they settle."""
    balances: dict[str, int] = {}
    for transaction in transactions:
        amount = to_cents(transaction.amount)
        balances[transaction.from_player] = balances.get(transaction.from_player, 0) - amount
        balances[transaction.to_player] = balances.get(transaction.to_player, 0) + amount
    return from_cents_map(balances)
