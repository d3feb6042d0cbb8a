from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from settleup.domain import (
    Card,
    CardAssignment,
    HoleCategories,
    PayoutSettings,
    Player,
    card_kind,
)
from settleup.services.settlement_service import CombinedGamesRequest


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Any | None = None


class PlayerIn(BaseModel):
    id: str = Field(..., min_length=1, examples=["p1"])
    name: str = Field(..., min_length=1, examples=["Alice"])


class CardIn(BaseModel):
    id: str = Field(..., min_length=1)
    type: str = Field(..., description="camel, fish, roadrunner, ghost, skunk, snake, yeti or custom")
    name: str | None = Field(default=None, description="Name of a custom card")


class CardAssignmentIn(BaseModel):
    card_id: str = Field(..., min_length=1)
    card_type: str = Field(..., examples=["camel"])
    card_name: str | None = None
    player_id: str = Field(..., min_length=1)
    card_value: Decimal | None = Field(default=None, ge=0, description="Value stored when the card was assigned")


class HoleCategoriesIn(BaseModel):
    first_on: str | None = None
    closest_to: str | None = None
    first_in: str | None = None


class CombinedGamesRequestIn(BaseModel):
    group_id: str = Field(..., min_length=1)
    players: list[PlayerIn] = Field(..., min_length=1)
    selected_games: list[str] = Field(
        default_factory=list,
        examples=[["cards", "points"]],
        description="Any of cards, points, fbt, bbb-points, bbb-fbt",
    )
    point_value: Decimal = Field(default=Decimal("1"), ge=0, description="Dollars per point")
    fbt_value: Decimal = Field(default=Decimal("10"), ge=0, description="Pot per front/back/total segment")
    card_history: list[CardAssignmentIn] = Field(default_factory=list)
    card_values: dict[str, Decimal] = Field(default_factory=dict)
    deck: list[CardIn] | None = None
    hole_points: dict[int, dict[str, Decimal]] = Field(default_factory=dict, description="2/9/16 points per hole")
    hole_strokes: dict[int, dict[str, Decimal]] = Field(default_factory=dict, description="Strokes per hole")
    bbb_holes: dict[int, HoleCategoriesIn] = Field(default_factory=dict)
    game_state_id: str | None = None
    points_game_id: str | None = None
    save_results: bool = False
    created_by: str | None = None

    def to_domain(self) -> CombinedGamesRequest:
        return CombinedGamesRequest(
            group_id=self.group_id,
            players=tuple(Player(id=player.id, name=player.name) for player in self.players),
            selected_games=tuple(self.selected_games),
            settings=PayoutSettings(point_value=self.point_value, fbt_value=self.fbt_value),
            card_history=tuple(
                CardAssignment(
                    card_id=assignment.card_id,
                    kind=card_kind(assignment.card_type, assignment.card_name),
                    player_id=assignment.player_id,
                    card_value=assignment.card_value,
                )
                for assignment in self.card_history
            ),
            card_values=dict(self.card_values),
            deck=None
            if self.deck is None
            else tuple(Card(id=card.id, kind=card_kind(card.type, card.name)) for card in self.deck),
            hole_points=self.hole_points,
            hole_strokes=self.hole_strokes,
            bbb_holes={
                hole: HoleCategories(
                    first_on=categories.first_on,
                    closest_to=categories.closest_to,
                    first_in=categories.first_in,
                )
                for hole, categories in self.bbb_holes.items()
            },
            game_state_id=self.game_state_id,
            points_game_id=self.points_game_id,
            save_results=self.save_results,
            created_by=self.created_by,
        )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "group_id": "g1",
                    "players": [{"id": "a", "name": "Alice"}, {"id": "b", "name": "Bob"}],
                    "selected_games": ["cards"],
                    "card_history": [
                        {"card_id": "c1", "card_type": "camel", "player_id": "a", "card_value": 2},
                    ],
                }
            ]
        }
    }


class TransactionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_player: str = Field(..., alias="from")
    to_player: str = Field(..., alias="to")
    amount: float


class NamedTransactionOut(TransactionOut):
    from_name: str
    to_name: str


class CardPayoutOut(BaseModel):
    player_id: str
    player_name: str
    debt: float
    net: float


class CardGameDetailsOut(BaseModel):
    total_pot: float
    payouts: list[CardPayoutOut]


class SettlementReportOut(BaseModel):
    payouts: dict[str, float]
    transactions: list[NamedTransactionOut]
    selected_games: list[str]
    total_transactions: int
    card_game_details: CardGameDetailsOut | None = None
    saved_id: int | None = None


class SnapshotOut(BaseModel):
    id: int
    group_id: str
    game_state_id: str | None = None
    points_game_id: str | None = None
    selected_games: list[str]
    point_value: float
    fbt_value: float
    result: SettlementReportOut
    created_by: str | None = None
    created_at: str


class CardNetRequest(BaseModel):
    debts: dict[str, Decimal]


class PointsNetRequest(BaseModel):
    scores: dict[str, Decimal]
    rate_per_point: Decimal = Field(default=Decimal("1"), ge=0)


class FbtNetRequest(BaseModel):
    front: dict[str, Decimal] = Field(default_factory=dict)
    back: dict[str, Decimal] = Field(default_factory=dict)
    total: dict[str, Decimal] = Field(default_factory=dict)
    pot_value: Decimal = Field(default=Decimal("10"), ge=0)


class NetResponse(BaseModel):
    net: dict[str, float]


class SettleRequest(BaseModel):
    net: dict[str, Decimal]


class SettleResponse(BaseModel):
    transactions: list[TransactionOut]
