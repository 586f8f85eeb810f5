from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import StrEnum

from statemachine import State, StateMachine


logger = logging.getLogger(__name__)

# listener(move, committed). `committed` is always False here: picking a move
# never performs it.
SelectionListener = Callable[[str, bool], None]


class SelectionPhase(StrEnum):
    empty = "empty"
    selectable = "selectable"


class SelectionFSM(StateMachine):
    """Guards the Empty <-> Selectable transitions of a candidate list."""

    empty = State(SelectionPhase.empty.value, value=SelectionPhase.empty.value, initial=True)
    selectable = State(SelectionPhase.selectable.value, value=SelectionPhase.selectable.value)

    offer_candidates = empty.to(selectable) | selectable.to.itself()
    withdraw_candidates = selectable.to(empty) | empty.to.itself()

    @property
    def phase(self) -> SelectionPhase:
        return SelectionPhase(str(self.current_state.value))


def _unique_in_order(moves: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(moves))


class MoveSelectionState:
    """Candidate moves plus the player's current (uncommitted) pick.

    Invariant: `current_selection()` is either None or one of `candidates`.
    """

    def __init__(self, candidates: Iterable[str] | None = None) -> None:
        self._fsm = SelectionFSM()
        self._candidates: tuple[str, ...] = ()
        self._selected: str | None = None
        self.initialize(candidates)

    @classmethod
    def restore(cls, *, candidates: Iterable[str] | None, selected: str | None) -> "MoveSelectionState":
        """Rebuild a persisted state without notifying anyone."""

        state = cls(candidates)
        if selected is not None and selected in state._candidates:
            state._selected = selected
        return state

    @property
    def phase(self) -> SelectionPhase:
        return self._fsm.phase

    @property
    def candidates(self) -> tuple[str, ...]:
        return self._candidates

    @property
    def is_available(self) -> bool:
        return self.phase == SelectionPhase.selectable

    def initialize(self, candidates: Iterable[str] | None) -> None:
        """Replace the candidate list.

        A selection that is still offered survives; anything else resets to None.
        """

        moves = _unique_in_order(candidates or ())
        self._candidates = moves

        if self._selected is not None and self._selected not in moves:
            self._selected = None

        if moves:
            self._fsm.offer_candidates()
        else:
            logger.debug("No moves available for selection")
            self._fsm.withdraw_candidates()

    def select(self, move: str, listener: SelectionListener | None = None) -> bool:
        """Select `move` and notify `listener`.

        Returns False (and does nothing) when `move` is not a current candidate,
        e.g. a stale UI event racing a candidate refresh.
        """

        if not self.is_available or move not in self._candidates:
            logger.debug("Ignoring selection of %r: not among %s", move, self._candidates)
            return False

        self._selected = move
        if listener is not None:
            listener(move, False)
        return True

    def current_selection(self) -> str | None:
        return self._selected
