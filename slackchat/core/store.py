# slackchat/core/store.py
from typing import Iterable, Iterator, List, Sequence, Set

from slackchat.model import Message, ts_to_datetime


class MessageStore:
    """Deduplicated, time-ordered channel timeline plus the polling cursor.

    ``merge`` is the only place messages enter the store. It tolerates
    overlapping, out-of-order and fully duplicate batches, so fetches that
    race each other can be applied in any order.
    """

    def __init__(self) -> None:
        self.messages: List[Message] = []
        self.seen_ids: Set[str] = set()
        self.sync_cursor: str = ""

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def merge(self, incoming: Iterable[Message]) -> bool:
        added = False
        for m in incoming:
            if m.id in self.seen_ids:
                continue
            self.messages.append(m)
            self.seen_ids.add(m.id)
            added = True
        if added:
            # list.sort is stable, equal timestamps keep arrival order
            self.messages.sort(key=lambda m: m.timestamp)
        return added

    def advance_cursor(self, incoming: Sequence[Message]) -> None:
        if not incoming:
            return
        newest = max(incoming, key=lambda m: m.timestamp)
        if not self.sync_cursor or newest.timestamp > ts_to_datetime(self.sync_cursor):
            self.sync_cursor = newest.id
