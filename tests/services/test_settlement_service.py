import logging
from decimal import Decimal

import pytest

from settleup.domain import (
    Card,
    CardAssignment,
    CustomCard,
    DomainValidationError,
    HoleCategories,
    InputReferenceError,
    InvariantViolation,
    PayoutSettings,
    Player,
    StandardCard,
    StandardCardType,
)
from settleup.services import settlement_service as service_module
from settleup.services.settlement_service import CombinedGamesRequest, SettlementService

PLAYERS = (Player("a", "Alice"), Player("b", "Bob"), Player("c", "Cat"), Player("d", "Dan"))

CARD_HISTORY = (
    CardAssignment(card_id="c1", kind=StandardCard(StandardCardType.CAMEL), player_id="a"),
    CardAssignment(card_id="c2", kind=StandardCard(StandardCardType.FISH), player_id="a"),
    CardAssignment(card_id="c3", kind=StandardCard(StandardCardType.SNAKE), player_id="c"),
    CardAssignment(card_id="c1", kind=StandardCard(StandardCardType.CAMEL), player_id="b"),
)
CARD_VALUES = {"camel": Decimal("2"), "fish": Decimal("3"), "snake": Decimal("4")}

HOLE_STROKES = {
    1: {"a": Decimal("3"), "b": Decimal("4"), "c": Decimal("5"), "d": Decimal("6")},
    10: {"a": Decimal("5"), "b": Decimal("4"), "c": Decimal("4"), "d": Decimal("4")},
}


def _request(**overrides) -> CombinedGamesRequest:
    fields = {
        "group_id": "g1",
        "players": PLAYERS,
        "selected_games": ("cards", "points"),
        "card_history": CARD_HISTORY,
        "card_values": CARD_VALUES,
        "hole_strokes": HOLE_STROKES,
    }
    fields.update(overrides)
    return CombinedGamesRequest(**fields)


def test_cards_and_points_combine_into_one_settlement() -> None:
    report = SettlementService().calculate(_request())

    assert report.selected_games == ["cards", "points"]
    assert report.payouts == {
        "a": Decimal("-3.00"),
        "b": Decimal("6.00"),
        "c": Decimal("-4.00"),
        "d": Decimal("1.00"),
    }
    assert [(t.from_name, t.to_name, t.amount) for t in report.transactions] == [
        ("Cat", "Bob", Decimal("4.00")),
        ("Alice", "Bob", Decimal("2.00")),
        ("Alice", "Dan", Decimal("1.00")),
    ]
    assert report.card_game_details is not None
    assert report.card_game_details.total_pot == Decimal("9")


def test_report_is_recomputed_identically() -> None:
    service = SettlementService()

    assert service.calculate(_request()).to_dict() == service.calculate(_request()).to_dict()


def test_bbb_points_and_fbt_modes() -> None:
    players = PLAYERS[:3]
    holes = {
        1: HoleCategories(first_on="a", closest_to="b", first_in="none"),
        2: HoleCategories(first_on="a", first_in="a"),
        10: HoleCategories(first_on="b", closest_to="b", first_in="c"),
    }

    report = SettlementService().calculate(
        CombinedGamesRequest(
            group_id="g1",
            players=players,
            selected_games=("bbb-points", "bbb-fbt"),
            bbb_holes=holes,
            settings=PayoutSettings(point_value=Decimal("1"), fbt_value=Decimal("10")),
        )
    )

    assert report.payouts == {"a": Decimal("12.00"), "b": Decimal("12.00"), "c": Decimal("-24.00")}
    assert [(t.from_player, t.to_player, t.amount) for t in report.transactions] == [
        ("c", "a", Decimal("12.00")),
        ("c", "b", Decimal("12.00")),
    ]


def test_points_and_bbb_points_at_uneven_rate_settle() -> None:
    report = SettlementService().calculate(
        CombinedGamesRequest(
            group_id="g1",
            players=PLAYERS[:3],
            selected_games=("points", "bbb-points"),
            settings=PayoutSettings(point_value=Decimal("0.125")),
            hole_strokes={1: {"a": Decimal("4"), "b": Decimal("4"), "c": Decimal("5")}},
            bbb_holes={1: HoleCategories(first_on="a", closest_to="b")},
        )
    )

    assert report.selected_games == ["points", "bbb-points"]
    assert report.payouts == {"a": Decimal("0.51"), "b": Decimal("0.51"), "c": Decimal("-1.02")}
    assert [(t.from_player, t.to_player, t.amount) for t in report.transactions] == [
        ("c", "a", Decimal("0.51")),
        ("c", "b", Decimal("0.51")),
    ]


def test_games_without_data_or_value_are_skipped() -> None:
    report = SettlementService().calculate(
        _request(selected_games=("cards", "fbt", "bbb-points"), settings=PayoutSettings(fbt_value=Decimal("0")))
    )

    assert report.selected_games == ["cards"]


def test_fbt_from_hole_points() -> None:
    report = SettlementService().calculate(
        _request(
            selected_games=("fbt",),
            hole_strokes={},
            hole_points={
                1: {"a": Decimal("7"), "b": Decimal("5"), "c": Decimal("3"), "d": Decimal("1")},
                10: {"a": Decimal("1"), "b": Decimal("5"), "c": Decimal("5"), "d": Decimal("5")},
            },
        )
    )

    # front: a wins; back: b, c, d split; total: b wins
    assert report.payouts == {
        "a": Decimal("-3.34"),
        "b": Decimal("10.00"),
        "c": Decimal("-3.33"),
        "d": Decimal("-3.33"),
    }
    assert sum(report.payouts.values()) == 0


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"selected_games": ()}, DomainValidationError),
        ({"selected_games": ("poker",)}, DomainValidationError),
        ({"players": PLAYERS + (Player("a", "Again"),)}, DomainValidationError),
        ({"hole_points": {1: {"a": Decimal("2")}}}, DomainValidationError),
        ({"card_history": (CardAssignment(card_id="x", kind=CustomCard("Bogey"), player_id="zed"),)}, InputReferenceError),
        ({"hole_strokes": {1: {"a": Decimal("3"), "zed": Decimal("4")}}}, InputReferenceError),
        ({"bbb_holes": {1: HoleCategories(first_on="zed")}}, InputReferenceError),
        ({"deck": (Card(id="c1", kind=StandardCard(StandardCardType.CAMEL)),)}, InputReferenceError),
    ],
)
def test_invalid_requests_are_rejected_before_computation(overrides, error) -> None:
    with pytest.raises(error):
        SettlementService().calculate(_request(**overrides))


def test_saved_report_replaces_previous_snapshot(repo) -> None:
    service = SettlementService(repo)

    first = service.calculate(_request(save_results=True, game_state_id="gs1"))
    second = service.calculate(_request(save_results=True, game_state_id="gs1", selected_games=("cards",)))

    assert first.saved_id is not None
    assert second.saved_id == first.saved_id

    snapshot = service.get_snapshot("g1", game_state_id="gs1")
    assert snapshot is not None
    assert snapshot.selected_games == ["cards"]
    assert snapshot.result["payouts"] == {"a": -3.0, "b": -2.0, "c": -4.0, "d": 9.0}
    assert snapshot.point_value == Decimal("1")


def test_unsaved_report_leaves_no_snapshot(repo) -> None:
    service = SettlementService(repo)

    report = service.calculate(_request())

    assert report.saved_id is None
    assert service.get_snapshot("g1") is None


def test_invariant_violation_aborts_without_saving(repo, monkeypatch, caplog) -> None:
    monkeypatch.setattr(
        service_module,
        "compute_points_game_net",
        lambda scores, rate: {player: Decimal("1.00") for player in scores},
    )
    service = SettlementService(repo, logger=logging.getLogger("settlement-test"))

    with caplog.at_level(logging.ERROR, logger="settlement-test"):
        with pytest.raises(InvariantViolation):
            service.calculate(_request(save_results=True))

    assert service.get_snapshot("g1") is None
    assert any(record.getMessage() == "settlement aborted" for record in caplog.records)
