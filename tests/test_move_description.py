from __future__ import annotations

from collections.abc import Mapping

import pytest

from app.moves.description import MoveDescriptionResolver, describe, lookup_record, record_field


class _DictSource:
    def __init__(self, records: dict[str, Mapping[str, str]]) -> None:
        self.records = records

    def get_record(self, move: str) -> Mapping[str, str] | None:
        return self.records.get(move)


class _ExplodingSource:
    def get_record(self, move: str) -> Mapping[str, str] | None:
        raise RuntimeError("data not loaded yet")


class _WrongShapeSource:
    def get_record(self, move: str):  # type: ignore[no-untyped-def]
        return ["not", "a", "record"]


class _ExplodingRecord(Mapping[str, str]):
    def __getitem__(self, key: str) -> str:
        raise KeyError(key)

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(())

    def __len__(self) -> int:
        return 0

    def get(self, key, default=None):  # type: ignore[no-untyped-def, override]
        raise ValueError("corrupt row")


def test_event_is_preferred_over_action() -> None:
    source = _DictSource({"OWNER-FUND": {"Event": "Draw a card", "Action": "Move"}})
    assert describe("OWNER-FUND", source) == "Draw a card"


def test_action_used_when_event_missing_or_empty() -> None:
    source = _DictSource(
        {
            "A": {"Action": "Hire an architect"},
            "B": {"Event": "", "Action": "Review funding"},
            "C": {"Event": None, "Action": "Draw a bank card"},  # type: ignore[dict-item]
        }
    )
    assert describe("A", source) == "Hire an architect"
    assert describe("B", source) == "Review funding"
    assert describe("C", source) == "Draw a bank card"


def test_non_empty_text_is_returned_verbatim() -> None:
    source = _DictSource(
        {
            "BLANK": {"Event": "   ", "Action": "Act"},
            "PADDED": {"Event": "  Draw a card ", "Action": "Act"},
        }
    )
    assert describe("BLANK", source) == "   "
    assert describe("PADDED", source) == "  Draw a card "


@pytest.mark.parametrize(
    "source",
    [
        None,
        _DictSource({}),
        _DictSource({"X": {}}),
        _DictSource({"X": {"Event": "", "Action": ""}}),
        _DictSource({"X": {"Description": "only a description"}}),
        _ExplodingSource(),
        _WrongShapeSource(),
        _DictSource({"X": _ExplodingRecord()}),
        object(),
    ],
)
def test_falls_back_to_move_id_and_never_raises(source: object) -> None:
    assert describe("X", source) == "X"  # type: ignore[arg-type]


def test_lookup_stages_return_none_on_absence() -> None:
    assert lookup_record("X", None) is None
    assert lookup_record("X", _ExplodingSource()) is None
    assert record_field(None, "Event") is None
    assert record_field({"Event": ""}, "Event") is None
    assert record_field({"Event": "  Go  "}, "Event") == "  Go  "
    assert record_field({"Phase": 3}, "Phase") == "3"  # type: ignore[dict-item]


def test_resolver_binds_a_source() -> None:
    resolver = MoveDescriptionResolver(_DictSource({"A": {"Event": "Start"}}))
    assert resolver.describe("A") == "Start"
    assert resolver.describe("B") == "B"
    assert MoveDescriptionResolver().describe("B") == "B"


def test_describe_against_loaded_spaces(spaces) -> None:  # type: ignore[no-untyped-def]
    assert describe("FUNDING-SCOPE-BANK", spaces) == "Apply for a bank loan"
    assert describe("ARCH-INITIATION", spaces) == "Hire an architect"
    assert describe("FUNDING-SCOPE-PRIVATE", spaces) == "FUNDING-SCOPE-PRIVATE"
    assert describe("NOT-A-SPACE", spaces) == "NOT-A-SPACE"
