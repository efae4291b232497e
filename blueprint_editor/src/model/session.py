"""Editing session that owns the open document."""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

from blueprint_editor.src.catalog.catalog import Catalog
from blueprint_editor.src.codec import bp_string
from blueprint_editor.src.common.constants import DEFAULT_CONFIG, EditorConfig
from blueprint_editor.src.common.diagnostics import EditorDiagnostics
from blueprint_editor.src.common.geometry import Cell
from .blueprint import Blueprint
from .book import Book

logger = logging.getLogger(__name__)

Document = Union[Blueprint, Book]


class EditorSession:
    """Holds one document at a time plus the copied entity settings.

    Loading a new string replaces the document only when decoding succeeds.
    """

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        config: EditorConfig = DEFAULT_CONFIG,
    ) -> None:
        self.catalog = catalog if catalog is not None else Catalog.default()
        self.config = config
        self.document: Optional[Document] = None
        self.diagnostics = EditorDiagnostics()
        self.diagnostics.default_stage = "session"
        self._copied: Optional[Tuple[Blueprint, int]] = None

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    def load(self, raw: str) -> Document:
        diagnostics = EditorDiagnostics()
        document = bp_string.decode(raw, self.catalog, diagnostics, self.config)
        self.diagnostics = diagnostics
        self._set_document(document)
        return document

    def load_result(self, raw: str) -> bp_string.DecodeResult:
        diagnostics = EditorDiagnostics()
        result = bp_string.try_decode(raw, self.catalog, self.config, diagnostics)
        if result.ok:
            self.diagnostics = diagnostics
            self._set_document(result.value)
        return result

    def new_blueprint(self, name: Optional[str] = None) -> Blueprint:
        blueprint = Blueprint(self.catalog, self.config, name=name)
        self._set_document(blueprint)
        return blueprint

    def _set_document(self, document: Optional[Document]) -> None:
        self.document = document
        self._copied = None
        logger.debug("Session document is now %r", document)

    def clear(self) -> None:
        self._set_document(None)

    @property
    def blueprint(self) -> Optional[Blueprint]:
        """The page being edited: the document itself or the book's active page."""
        if isinstance(self.document, Book):
            return self.document.get_blueprint()
        return self.document

    @property
    def book(self) -> Optional[Book]:
        return self.document if isinstance(self.document, Book) else None

    def select_page(self, index: int) -> Optional[Blueprint]:
        if isinstance(self.document, Book):
            return self.document.get_blueprint(index)
        return self.document

    def export(self) -> Optional[str]:
        """Encode the document; None when there is nothing worth exporting."""
        if self.document is None or bp_string.is_empty(self.document):
            return None
        return bp_string.encode(self.document, self.config)

    # ------------------------------------------------------------------
    # Edits on the active page
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        blueprint = self.blueprint
        return blueprint.undo() if blueprint is not None else False

    def redo(self) -> bool:
        blueprint = self.blueprint
        return blueprint.redo() if blueprint is not None else False

    def generate_pipes(
        self, collection_point: Optional[Cell] = None, allow_rotation: bool = False
    ) -> Optional[str]:
        blueprint = self.blueprint
        if blueprint is None:
            return None
        return blueprint.generate_pipes(collection_point, allow_rotation)

    def copy_settings(self, entity_id: int) -> None:
        blueprint = self.blueprint
        if blueprint is None:
            return
        blueprint.graph.require(entity_id)
        self._copied = (blueprint, entity_id)

    def paste_settings(self, entity_id: int) -> bool:
        """Paste the copied settings onto ``entity_id`` of the same page."""
        blueprint = self.blueprint
        if self._copied is None or blueprint is None:
            return False
        source_page, source_id = self._copied
        if source_page is not blueprint or source_id not in blueprint.graph:
            return False
        return blueprint.paste_settings(source_id, entity_id)
