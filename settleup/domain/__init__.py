from .errors import DomainValidationError, InputReferenceError, InvariantViolation
from .games import (
    CardGameResult,
    CardPayout,
    card_debts_from_history,
    card_game_details,
    compute_card_game_net,
    compute_fbt_game_net,
    compute_points_game_net,
    count_category_points,
    hole_points_2916,
    segment_category_points,
    segment_hole_points,
    sum_hole_points,
)
from .money import CENT, from_cents, reconcile_pennies, round_cents, to_cents
from .records import (
    DEFAULT_CARD_VALUES,
    NO_WINNER,
    Card,
    CardAssignment,
    CardKind,
    CustomCard,
    HoleCategories,
    PayoutSettings,
    Player,
    SegmentTotals,
    StandardCard,
    StandardCardType,
    Transaction,
    card_kind,
    resolve_card_value,
    unique_preserve_order,
)
from .settlement import apply_transactions, combine_nets, settle
from .validation import ensure_category_winners_known, ensure_known_players, validate_card_assignment

__all__ = [
    "CENT",
    "DEFAULT_CARD_VALUES",
    "NO_WINNER",
    "Card",
    "CardAssignment",
    "CardGameResult",
    "CardKind",
    "CardPayout",
    "CustomCard",
    "DomainValidationError",
    "HoleCategories",
    "InputReferenceError",
    "InvariantViolation",
    "PayoutSettings",
    "Player",
    "SegmentTotals",
    "StandardCard",
    "StandardCardType",
    "Transaction",
    "apply_transactions",
    "card_debts_from_history",
    "card_game_details",
    "card_kind",
    "combine_nets",
    "compute_card_game_net",
    "compute_fbt_game_net",
    "compute_points_game_net",
    "count_category_points",
    "ensure_category_winners_known",
    "ensure_known_players",
    "from_cents",
    "hole_points_2916",
    "reconcile_pennies",
    "resolve_card_value",
    "round_cents",
    "segment_category_points",
    "segment_hole_points",
    "settle",
    "sum_hole_points",
    "to_cents",
    "unique_preserve_order",
    "validate_card_assignment",
]
