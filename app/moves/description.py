from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol


logger = logging.getLogger(__name__)

# Checked in this order; the move id itself is the last resort.
DESCRIPTION_FIELDS: tuple[str, ...] = ("Event", "Action")


class MoveDescriptionSource(Protocol):
    """Read-only lookup from a move id to its data row (field name -> value)."""

    def get_record(self, move: str) -> Mapping[str, str] | None: ...


def lookup_record(move: str, source: MoveDescriptionSource | None) -> Mapping[str, str] | None:
    """Return the record for `move`, or None if the source is missing, empty, or broken."""

    if source is None:
        return None
    try:
        record = source.get_record(move)
    except Exception:
        logger.warning("Error getting move description for %r", move, exc_info=True)
        return None
    if not isinstance(record, Mapping):
        return None
    return record


def record_field(record: Mapping[str, str] | None, field: str) -> str | None:
    if record is None:
        return None
    try:
        value = record.get(field)
    except Exception:
        logger.warning("Unreadable %r field in move record", field, exc_info=True)
        return None
    # Only None and "" count as missing; any other text is returned as stored.
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def describe(move: str, source: MoveDescriptionSource | None) -> str:
    """Best-effort display text for a move.

    Never raises: a missing source, record or field degrades to the next
    candidate, ending with the move id.
    """

    record = lookup_record(move, source)
    for field in DESCRIPTION_FIELDS:
        value = record_field(record, field)
        if value is not None:
            return value
    return move


@dataclass(frozen=True, slots=True)
class MoveDescriptionResolver:
    """`describe` bound to one data source, for injection into presenters/routes."""

    source: MoveDescriptionSource | None = None

    def describe(self, move: str) -> str:
        return describe(move, self.source)
