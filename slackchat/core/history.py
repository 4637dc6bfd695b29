# slackchat/core/history.py
import logging
import os
from typing import Iterable, List, Optional, Tuple

from slackchat.errors import HistoryWriteError


class HistoryLog:
    """Previously submitted input lines with a recall cursor.

    ``cursor == len(entries)`` means the input is live (not browsing).
    The backing file is append-only and opened per write.
    """

    def __init__(self, path: Optional[str] = None, entries: Optional[Iterable[str]] = None):
        self.path = path
        self.entries: List[str] = list(entries or [])
        self.cursor = len(self.entries)

    @classmethod
    def load(cls, path: str) -> "HistoryLog":
        entries: List[str] = []
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                entries = [line.rstrip("\n") for line in f]
        logging.info(f"Loaded {len(entries)} history entries from {path}")
        return cls(path, entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def browsing(self) -> bool:
        return self.cursor < len(self.entries)

    def position(self) -> Tuple[int, int]:
        return self.cursor + 1, len(self.entries)

    def submit(self, text: str) -> bool:
        """Record ``text``; returns False when it was blank or a repeat.

        Raises HistoryWriteError if the line could not be persisted. The
        in-memory entry is kept either way.
        """
        if not text.strip():
            return False
        if self.entries and self.entries[-1] == text:
            return False

        self.entries.append(text)
        self.cursor = len(self.entries)

        if self.path is None:
            return True
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(text + "\n")
        except OSError as e:
            raise HistoryWriteError(f"history write failed: {e}") from e
        return True

    def navigate(self, direction: int, current: str = "") -> str:
        new_cursor = max(0, min(len(self.entries), self.cursor + direction))
        if new_cursor == self.cursor:
            return current
        self.cursor = new_cursor
        if self.cursor == len(self.entries):
            return ""
        return self.entries[self.cursor]

    def reset_cursor(self) -> None:
        self.cursor = len(self.entries)
