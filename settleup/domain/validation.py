from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from .errors import InputReferenceError
from .records import Card, HoleCategories, Player


def validate_card_assignment(card_id: str, player_id: str, deck: Sequence[Card], players: Sequence[Player]) -> None:
    if not any(card.id == card_id for card in deck):
        raise InputReferenceError("card not found in deck", missing=[card_id])
    if not any(player.id == player_id for player in players):
        raise InputReferenceError("player not found", missing=[player_id])


def ensure_known_players(player_ids: Iterable[str], roster: Iterable[str], what: str = "player") -> None:
    known = set(roster)
    missing = sorted({player_id for player_id in player_ids if player_id not in known})
    if missing:
        raise InputReferenceError(f"unknown {what}: {', '.join(missing)}", missing=missing)


def ensure_category_winners_known(holes: Mapping[int, HoleCategories], roster: Iterable[str]) -> None:
    winners = [winner for categories in holes.values() for winner in categories.winners()]
    ensure_known_players(winners, roster, what="category winner")
