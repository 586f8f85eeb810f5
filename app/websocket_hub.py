from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Sequence
from typing import Any

from fastapi import WebSocket


logger = logging.getLogger(__name__)


def selection_changed_event(*, session_id: str, move: str) -> dict[str, Any]:
    # A pick is never a commit; the flag is spelled out so clients don't have to infer it.
    return {"type": "selection_changed", "session_id": session_id, "move": move, "committed": False}


def candidates_changed_event(*, session_id: str, candidates: Sequence[str], selected: str | None) -> dict[str, Any]:
    return {
        "type": "candidates_changed",
        "session_id": session_id,
        "candidates": list(candidates),
        "selected": selected,
    }


class SessionWebSocketHub:
    """Pushes selection updates to every browser tab watching a session.

    Sockets that fail on send are dropped; the rest still get the event.
    """

    def __init__(self) -> None:
        self._watchers: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, session_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._watchers[session_id].add(websocket)

    async def disconnect(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            watchers = self._watchers.get(session_id, set())
            watchers.discard(websocket)
            if not watchers:
                self._watchers.pop(session_id, None)

    def watcher_count(self, session_id: str) -> int:
        return len(self._watchers.get(session_id, ()))

    async def _send(self, session_id: str, payload: dict[str, Any]) -> None:
        async with self._lock:
            targets = list(self._watchers.get(session_id, ()))

        results = await asyncio.gather(*(ws.send_json(payload) for ws in targets), return_exceptions=True)
        failed = [ws for ws, res in zip(targets, results) if isinstance(res, Exception)]
        for ws in failed:
            logger.debug("Dropping websocket for session %s after failed send", session_id)
            await self.disconnect(session_id, ws)

    async def selection_changed(self, session_id: str, move: str) -> None:
        await self._send(session_id, selection_changed_event(session_id=session_id, move=move))

    async def candidates_changed(self, session_id: str, candidates: Sequence[str], selected: str | None) -> None:
        await self._send(
            session_id,
            candidates_changed_event(session_id=session_id, candidates=candidates, selected=selected),
        )


hub = SessionWebSocketHub()
