from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator


class SessionCreateRequest(BaseModel):
    # Shallow overlay onto the default session config; unknown keys are kept.
    overrides: dict[str, Any] = Field(default_factory=dict)


class SessionResponse(BaseModel):
    id: str
    config: dict[str, Any]
    created_at: datetime


class CandidatesRequest(BaseModel):
    """Either an explicit candidate list or a space whose next spaces become the candidates."""

    candidates: list[str] | None = None
    from_space: str | None = None

    @model_validator(mode="after")
    def _one_source(self) -> "CandidatesRequest":
        if (self.candidates is None) == (self.from_space is None):
            raise ValueError("Provide exactly one of 'candidates' or 'from_space'")
        return self


class SelectRequest(BaseModel):
    move: str = Field(..., min_length=1)


class MoveOptionView(BaseModel):
    move: str
    description: str
    category: str
    visit_type: str = "Move"
    # The row's `Description` column, shown under the move when present.
    description_detail: str | None = None
    is_selected: bool = False


class MoveSelectionView(BaseModel):
    # False means "nothing to select": the UI shows no interactive affordance.
    available: bool
    phase: str
    selected: str | None = None
    options: list[MoveOptionView] = Field(default_factory=list)
    categories: dict[str, list[str]] = Field(default_factory=dict)


class SingleMoveView(BaseModel):
    move: str
    phase: str = "N/A"
    description: str | None = None
    category: str
    found: bool = False


class DescriptionResponse(BaseModel):
    move: str
    description: str


class SelectionRecord(BaseModel):
    """Persisted per-session selection state."""

    candidates: list[str] = Field(default_factory=list)
    selected: str | None = None
