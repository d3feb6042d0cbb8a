from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping, Union

from .errors import DomainValidationError

NO_WINNER = "none"


class StandardCardType(str, Enum):
    CAMEL = "camel"
    FISH = "fish"
    ROADRUNNER = "roadrunner"
    GHOST = "ghost"
    SKUNK = "skunk"
    SNAKE = "snake"
    YETI = "yeti"


DEFAULT_CARD_VALUES: dict[str, Decimal] = {card.value: Decimal("2") for card in StandardCardType}


@dataclass(frozen=True)
class Player:
    id: str
    name: str


@dataclass(frozen=True)
class StandardCard:
    type: StandardCardType


@dataclass(frozen=True)
class CustomCard:
    name: str


CardKind = Union[StandardCard, CustomCard]


def card_kind(card_type: str, card_name: str | None = None) -> CardKind:
    """Build a card kind from the wire representation (`type` plus optional `name`)."""
    if card_type == "custom":
        if not card_name or not card_name.strip():
            raise DomainValidationError("custom card requires a name")
        return CustomCard(name=card_name.strip())
    try:
        return StandardCard(type=StandardCardType(card_type))
    except ValueError as exc:
        raise DomainValidationError(f"unknown card type: {card_type}") from exc


def resolve_card_value(
    kind: CardKind,
    card_values: Mapping[str, Decimal] | None = None,
    stored_value: Decimal | None = None,
) -> Decimal:
    """Current value of a card.

    Group values win over the value stored with the assignment. Custom cards are
    looked up by name, then by lower-cased name.
    """
    values = card_values or {}
    if isinstance(kind, CustomCard):
        candidates = (kind.name, kind.name.lower())
    else:
        candidates = (kind.type.value,)

    for key in candidates:
        if key in values:
            return Decimal(values[key])
    if stored_value is not None:
        return Decimal(stored_value)
    if isinstance(kind, StandardCard):
        return DEFAULT_CARD_VALUES[kind.type.value]
    return Decimal("0")


@dataclass(frozen=True)
class Card:
    id: str
    kind: CardKind


@dataclass(frozen=True)
class CardAssignment:
    card_id: str
    kind: CardKind
    player_id: str
    card_value: Decimal | None = None


@dataclass(frozen=True)
class HoleCategories:
    first_on: str | None = None
    closest_to: str | None = None
    first_in: str | None = None

    def winners(self) -> list[str]:
        return [
            winner
            for winner in (self.first_on, self.closest_to, self.first_in)
            if winner and winner != NO_WINNER
        ]


@dataclass(frozen=True)
class SegmentTotals:
    front: dict[str, Decimal]
    back: dict[str, Decimal]
    total: dict[str, Decimal]


@dataclass(frozen=True)
class PayoutSettings:
    point_value: Decimal = Decimal("1")
    fbt_value: Decimal = Decimal("10")

    def __post_init__(self) -> None:
        object.__setattr__(self, "point_value", Decimal(self.point_value))
        object.__setattr__(self, "fbt_value", Decimal(self.fbt_value))
        if self.point_value < 0:
            raise DomainValidationError("point_value must not be negative")
        if self.fbt_value < 0:
            raise DomainValidationError("fbt_value must not be negative")


@dataclass(frozen=True)
class Transaction:
    from_player: str
    to_player: str
    amount: Decimal

    def to_dict(self) -> dict[str, str | Decimal]:
        return {"from": self.from_player, "to": self.to_player, "amount": self.amount}


def unique_preserve_order(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
