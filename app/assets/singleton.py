from __future__ import annotations

import logging
import os
from pathlib import Path

from app.assets.registry import SpaceTable, load_space_assets


logger = logging.getLogger(__name__)

# app/assets/singleton.py -> project root holding `assets/spaces.csv`
DEFAULT_PROJECT_ROOT = Path(__file__).resolve().parents[2]

_SPACES: SpaceTable | None = None


def spaces_root() -> Path:
    """Directory whose `assets/spaces.csv` backs move descriptions (PATHWAY_ASSETS_ROOT overrides)."""

    override = os.environ.get("PATHWAY_ASSETS_ROOT", "").strip()
    return Path(override) if override else DEFAULT_PROJECT_ROOT


def init_spaces(*, project_root: Path | None = None) -> SpaceTable:
    """Build the process-wide move-description source once, at startup.

    Later calls return the table already loaded, whatever root they pass.
    """

    global _SPACES
    if _SPACES is None:
        root = project_root or spaces_root()
        _SPACES = load_space_assets(root=root)
        logger.info("Loaded %d spaces from %s", len(_SPACES), root)
    return _SPACES


def reset_spaces_for_tests() -> None:
    global _SPACES
    _SPACES = None


def get_spaces() -> SpaceTable:
    if _SPACES is None:
        raise RuntimeError("Spaces not initialized. Call init_spaces() at startup.")
    return _SPACES
