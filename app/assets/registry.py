from __future__ import annotations

import csv
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType


SPACE_NAME_FIELD = "Space Name"
NEXT_SPACE_FIELDS: tuple[str, ...] = tuple(f"Space {i}" for i in range(1, 6))


def _norm_key(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip().casefold()


class AssetLoadError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class SpaceTable:
    """Board spaces keyed by `Space Name`.

    One row per space; when the CSV repeats a name the first row wins. Lookups
    try the exact name first, then a case/whitespace-forgiving match.
    """

    rows: tuple[Mapping[str, str], ...]
    _by_name: dict[str, Mapping[str, str]]
    _key_to_name: dict[str, str]

    @staticmethod
    def from_rows(rows: list[dict[str, str]]) -> "SpaceTable":
        kept: list[Mapping[str, str]] = []
        by_name: dict[str, Mapping[str, str]] = {}
        key_to_name: dict[str, str] = {}

        for r in rows:
            name = (r.get(SPACE_NAME_FIELD) or "").strip()
            if not name or name in by_name:
                continue
            frozen = MappingProxyType(dict(r))
            kept.append(frozen)
            by_name[name] = frozen
            key_to_name.setdefault(_norm_key(name), name)

        return SpaceTable(rows=tuple(kept), _by_name=by_name, _key_to_name=key_to_name)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._by_name)

    def resolve_name(self, name: str) -> str | None:
        if name in self._by_name:
            return name
        return self._key_to_name.get(_norm_key(name))

    def get_record(self, move: str) -> Mapping[str, str] | None:
        canonical = self.resolve_name(move)
        if canonical is None:
            return None
        return self._by_name[canonical]

    def next_moves(self, space: str) -> tuple[str, ...]:
        """Non-empty `Space 1`..`Space 5` values, in column order."""

        record = self.get_record(space)
        if record is None:
            return ()
        moves = [(record.get(f) or "").strip() for f in NEXT_SPACE_FIELDS]
        return tuple(dict.fromkeys(m for m in moves if m))

    def is_decision_point(self, space: str) -> bool:
        return len(self.next_moves(space)) > 1

    def __contains__(self, item: object) -> bool:
        return isinstance(item, str) and self.resolve_name(item) is not None

    def __len__(self) -> int:
        return len(self.rows)


def load_space_csv(path: Path) -> SpaceTable:
    """Parse a spaces CSV (header row required, `Space Name` column mandatory).

    Quoted cells may span lines. Short rows read as empty cells; blank rows are skipped.
    """

    try:
        with path.open(encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f, restval="")
            header = [h.strip() for h in reader.fieldnames or []]
            if not header:
                raise AssetLoadError(f"Empty spaces CSV: {path}")
            if SPACE_NAME_FIELD not in header:
                raise AssetLoadError(f"Missing '{SPACE_NAME_FIELD}' column in {path}: {header}")
            reader.fieldnames = header

            out: list[dict[str, str]] = []
            for row in reader:
                # Cells beyond the header land under the None key; drop them.
                cells = {k: (v or "").strip() for k, v in row.items() if k is not None}
                if any(cells.values()):
                    out.append(cells)
    except FileNotFoundError as e:
        raise AssetLoadError(f"Asset file not found: {path}") from e
    except (csv.Error, UnicodeDecodeError) as e:
        raise AssetLoadError(f"Unreadable spaces CSV {path}: {e}") from e

    return SpaceTable.from_rows(out)


def _fallback_space_table() -> SpaceTable:
    """Tiny built-in board used when the real spaces CSV is missing."""

    def space(name: str, phase: str, event: str = "", action: str = "", *nxt: str) -> dict[str, str]:
        row = {
            SPACE_NAME_FIELD: name,
            "Phase": phase,
            "Event": event,
            "Action": action,
            "Description": "",
            "Visit Type": "First",
        }
        for field, value in zip(NEXT_SPACE_FIELDS, nxt):
            row[field] = value
        return row

    return SpaceTable.from_rows(
        [
            space("OWNER-SCOPE-INITIATION", "SETUP", "Project scope is defined", "", "OWNER-FUND-INITIATION"),
            space(
                "OWNER-FUND-INITIATION",
                "FUNDING",
                "",
                "Review funding options",
                "FUNDING-SCOPE-BANK",
                "ARCH-INITIATION",
            ),
            space("FUNDING-SCOPE-BANK", "FUNDING", "Apply for a bank loan", "", "ARCH-INITIATION"),
            space("ARCH-INITIATION", "DESIGN", "", "Hire an architect", "REG-DOB-TYPE-SELECT"),
            space("REG-DOB-TYPE-SELECT", "REGULATORY", "", "", "FINISH"),
            space("FINISH", "END"),
        ]
    )


def load_space_assets(*, root: Path) -> SpaceTable:
    assets_dir = root / "assets"

    # Fall back to a tiny dummy board when the CSV is missing.
    # Force strict behavior by setting PATHWAY_STRICT_ASSETS=1.
    strict = os.getenv("PATHWAY_STRICT_ASSETS", "").strip().lower() in {"1", "true", "yes"}

    try:
        return load_space_csv(assets_dir / "spaces.csv")
    except AssetLoadError:
        if strict:
            raise
        return _fallback_space_table()
