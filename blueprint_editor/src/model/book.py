from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from blueprint_editor.src.common.constants import DEFAULT_CONFIG, EditorConfig
from .blueprint import Blueprint, Icon

"""Ordered book of blueprints with a clamped active page."""


class Book:
    """A sequence of blueprints; the active index is always a valid page."""

    def __init__(
        self,
        blueprints: Iterable[Blueprint] = (),
        active_index: Optional[int] = 0,
        name: Optional[str] = None,
        description: str = "",
        icons: Iterable[Icon] = (),
        version: Optional[Tuple[int, int, int, int]] = None,
        extra: Optional[Mapping[str, Any]] = None,
        config: EditorConfig = DEFAULT_CONFIG,
    ) -> None:
        self.config = config
        self._blueprints: List[Blueprint] = list(blueprints)
        self.name = name if name is not None else config.default_book_name
        self.description = description
        self.icons: List[Icon] = list(icons)
        self.version = tuple(version) if version is not None else config.default_version
        self.extra: Dict[str, Any] = dict(extra or {})
        self._active_index: Optional[int] = None
        self.active_index = active_index if active_index is not None else 0

    @property
    def blueprints(self) -> Tuple[Blueprint, ...]:
        return tuple(self._blueprints)

    @property
    def last_index(self) -> int:
        return len(self._blueprints) - 1

    @property
    def active_index(self) -> Optional[int]:
        return self._active_index

    @active_index.setter
    def active_index(self, index: int) -> None:
        self._active_index = self._clamp(index)

    def _clamp(self, index: int) -> Optional[int]:
        if not self._blueprints:
            return None
        return max(0, min(int(index), self.last_index))

    def get_blueprint(self, index: Optional[int] = None) -> Optional[Blueprint]:
        """The page at ``index``, or the active page when no index is given.

        Out-of-range indices are clamped and become the active index.
        """
        if index is not None:
            self.active_index = index
        if self._active_index is None:
            return None
        return self._blueprints[self._active_index]

    def append(self, blueprint: Blueprint) -> int:
        self._blueprints.append(blueprint)
        if self._active_index is None:
            self._active_index = 0
        return self.last_index

    def is_empty(self) -> bool:
        return all(blueprint.is_empty() for blueprint in self._blueprints)

    def __len__(self) -> int:
        return len(self._blueprints)

    def __iter__(self) -> Iterator[Blueprint]:
        return iter(self._blueprints)

    def __getitem__(self, index: int) -> Blueprint:
        return self._blueprints[index]

    def __repr__(self) -> str:
        return f"Book({self.name!r}, pages={len(self._blueprints)}, active={self._active_index})"
