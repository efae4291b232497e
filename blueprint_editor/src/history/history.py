"""Linear undo/redo stack bound to one document."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from blueprint_editor.src.common.constants import DEFAULT_CONFIG, EditorConfig
from .actions import HistoryEntry, Transaction

logger = logging.getLogger(__name__)


class History:
    """Entries before the cursor are done, entries after it are undone.

    Applying a new entry discards the undone tail. ``limit`` caps the number
    of retained entries; the oldest are dropped first.
    """

    def __init__(self, document, config: EditorConfig = DEFAULT_CONFIG) -> None:
        self.document = document
        self.limit: Optional[int] = config.history_limit
        self._entries: List[HistoryEntry] = []
        self._cursor = 0
        self._pending: Optional[List[HistoryEntry]] = None

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def can_undo(self) -> bool:
        return self._pending is None and self._cursor > 0

    def can_redo(self) -> bool:
        return self._pending is None and self._cursor < len(self._entries)

    @property
    def in_transaction(self) -> bool:
        return self._pending is not None

    def apply(self, entry: HistoryEntry) -> HistoryEntry:
        """Execute ``entry`` and record it.

        If the forward effect raises, nothing is recorded.
        """
        entry.apply(self.document)
        if self._pending is not None:
            self._pending.append(entry)
        else:
            self._push(entry)
        return entry

    def _push(self, entry: HistoryEntry) -> None:
        del self._entries[self._cursor :]
        self._entries.append(entry)
        if self.limit is not None and len(self._entries) > self.limit:
            dropped = len(self._entries) - self.limit
            del self._entries[:dropped]
        self._cursor = len(self._entries)
        logger.debug("Applied: %s", entry.description)

    def undo(self) -> bool:
        if not self.can_undo():
            return False
        entry = self._entries[self._cursor - 1]
        entry.revert(self.document)
        self._cursor -= 1
        logger.debug("Undid: %s", entry.description)
        return True

    def redo(self) -> bool:
        if not self.can_redo():
            return False
        entry = self._entries[self._cursor]
        entry.apply(self.document)
        self._cursor += 1
        logger.debug("Redid: %s", entry.description)
        return True

    @contextmanager
    def transaction(self, label: str) -> Iterator[List[HistoryEntry]]:
        """Group every entry applied inside the block into one undo step.

        Nested transactions fold into the outermost one. If the block raises,
        the entries applied so far are reverted and the error propagates.
        """
        if self._pending is not None:
            yield self._pending
            return

        self._pending = []
        try:
            yield self._pending
        except Exception:
            pending, self._pending = self._pending, None
            for entry in reversed(pending):
                entry.revert(self.document)
            raise
        pending, self._pending = self._pending, None
        if pending:
            self._push(Transaction(label, tuple(pending)))

    def clear(self) -> None:
        self._entries.clear()
        self._cursor = 0
