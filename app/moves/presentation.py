from __future__ import annotations

from collections.abc import Iterable

from app.api.models import MoveOptionView, MoveSelectionView, SingleMoveView
from app.moves.description import MoveDescriptionSource, describe, lookup_record, record_field
from app.moves.selection import MoveSelectionState


OTHER_CATEGORY = "OTHER"

# Category -> move id prefixes. First match wins, in this order.
MOVE_CATEGORIES: dict[str, tuple[str, ...]] = {
    "FINANCIAL": ("FUND", "SCOPE"),
    "ARCHITECTURE": ("ARCH",),
    "REGULATORY": ("REG", "DOB"),
    "PLANNING": ("PLAN",),
    "EXECUTION": ("EXEC", "BUILD"),
    "CLOSING": ("CLOSE", "FINISH"),
}


def categorize_move(move: str) -> str:
    for category, prefixes in MOVE_CATEGORIES.items():
        if move.startswith(prefixes):
            return category
    return OTHER_CATEGORY


def group_by_category(moves: Iterable[str]) -> dict[str, list[str]]:
    """Group moves by category.

    Categories appear in first-seen order; moves keep their candidate order.
    """

    grouped: dict[str, list[str]] = {}
    for move in moves:
        grouped.setdefault(categorize_move(move), []).append(move)
    return grouped


def present_option(move: str, *, source: MoveDescriptionSource | None, selected: str | None) -> MoveOptionView:
    record = lookup_record(move, source)
    return MoveOptionView(
        move=move,
        description=describe(move, source),
        category=categorize_move(move),
        visit_type=record_field(record, "Visit Type") or "Move",
        description_detail=record_field(record, "Description"),
        is_selected=selected == move,
    )


def present_selection(state: MoveSelectionState, source: MoveDescriptionSource | None) -> MoveSelectionView:
    """Build the view model a front end renders as a radio group.

    An empty candidate list yields `available=False` and no options.
    """

    selected = state.current_selection()
    options = [present_option(m, source=source, selected=selected) for m in state.candidates]
    return MoveSelectionView(
        available=state.is_available,
        phase=state.phase.value,
        selected=selected,
        options=options,
        categories=group_by_category(state.candidates),
    )


def present_single_move(move: str, source: MoveDescriptionSource | None) -> SingleMoveView:
    record = lookup_record(move, source)
    return SingleMoveView(
        move=move,
        phase=record_field(record, "Phase") or "N/A",
        description=record_field(record, "Description"),
        category=categorize_move(move),
        found=record is not None,
    )
