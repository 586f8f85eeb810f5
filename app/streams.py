from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Mapping, cast

import redis

from app.moves.selection import SelectionListener


@dataclass(frozen=True, slots=True)
class Mailbox:
    session_id: str

    @property
    def key(self) -> str:
        return f"mailbox:{self.session_id}"


def publish_to_mailbox(*, r: redis.Redis, mailbox: Mailbox, fields: Mapping[str, str]) -> str:
    """Append an entry to a session's mailbox stream."""

    # redis-py stubs expect field/value unions; in our app we only use string fields/values.
    stream_id = r.xadd(mailbox.key, {str(k): str(v) for k, v in fields.items()})
    return cast(str, stream_id)


def mailbox_listener(*, r: redis.Redis, mailbox: Mailbox) -> SelectionListener:
    """Selection listener that records each pick as a `move_selected` stream entry.

    Consumers decide if and when to commit; this only reports the choice.
    """

    def _on_select(move: str, committed: bool) -> None:
        publish_to_mailbox(
            r=r,
            mailbox=mailbox,
            fields={
                "type": "move_selected",
                "session_id": mailbox.session_id,
                "move": move,
                "committed": "true" if committed else "false",
                "ts": datetime.now(tz=UTC).isoformat(),
            },
        )

    return _on_select


def read_mailbox(
    *,
    r: redis.Redis,
    mailbox: Mailbox,
    count: int = 20,
    start: str = "-",
    end: str = "+",
) -> list[tuple[str, dict[str, str]]]:
    entries = r.xrange(mailbox.key, min=start, max=end, count=count)
    return [(cast(str, mid), cast(dict[str, str], fields)) for mid, fields in entries]
