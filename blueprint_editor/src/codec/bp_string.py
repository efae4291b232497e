"""
Blueprint interchange string codec.

A string is a one-character version marker followed by base64 of the
zlib-compressed JSON document. The compression layers are handled by
draftsman; this module adds marker handling, validation and model building.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from draftsman.error import MalformedBlueprintStringError
from draftsman.utils import JSON_to_string, string_to_JSON

from blueprint_editor.src.catalog.catalog import Catalog
from blueprint_editor.src.common.constants import DEFAULT_CONFIG, EditorConfig
from blueprint_editor.src.common.diagnostics import EditorDiagnostics
from blueprint_editor.src.model.blueprint import Blueprint
from blueprint_editor.src.model.book import Book
from .errors import BlueprintStringError, EncodeError, InvalidFormatError
from .serializer import document_from_dict, document_to_dict

logger = logging.getLogger(__name__)

Document = Union[Blueprint, Book]


def decode_payload(raw: Any, config: EditorConfig = DEFAULT_CONFIG) -> Any:
    """Undo the string layers and return the raw JSON value."""
    if not isinstance(raw, str):
        raise InvalidFormatError("Blueprint string must be text")
    text = raw.strip()
    if not text:
        raise InvalidFormatError("Blueprint string is empty")
    if text[0] != config.version_marker:
        raise InvalidFormatError(f"Unknown version marker {text[0]!r}")
    try:
        return string_to_JSON(text)
    except MalformedBlueprintStringError as e:
        raise InvalidFormatError("Blueprint string could not be decoded") from e


def decode(
    raw: str,
    catalog: Optional[Catalog] = None,
    diagnostics: Optional[EditorDiagnostics] = None,
    config: EditorConfig = DEFAULT_CONFIG,
) -> Document:
    """Decode an interchange string into a Blueprint or Book.

    Args:
        raw: The interchange string; surrounding whitespace is ignored
        catalog: Known kinds (defaults to the bundled game data)
        diagnostics: Collector for skipped entities and wires
        config: Editor configuration

    Raises:
        InvalidFormatError: Malformed string or document structure
        UnsupportedTrainBlueprintError: Train family kinds present
        UnsupportedModdedContentError: Other unknown kinds present
    """
    payload = decode_payload(raw, config)
    document = document_from_dict(payload, catalog, diagnostics, config)
    logger.debug("Decoded %r", document)
    return document


def encode(document: Document, config: EditorConfig = DEFAULT_CONFIG) -> str:
    """Encode a Blueprint or Book; entities are numbered in iteration order."""
    try:
        payload = document_to_dict(document)
        encoded = JSON_to_string(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise EncodeError(f"Could not encode {document!r}: {e}") from e
    # JSON_to_string always writes marker "0"
    return config.version_marker + encoded[1:]


def is_empty(document: Document) -> bool:
    return document.is_empty()


@dataclass
class DecodeResult:
    value: Optional[Document] = None
    error: Optional[BlueprintStringError] = None
    diagnostics: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class EncodeResult:
    value: Optional[str] = None
    error: Optional[EncodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def try_decode(
    raw: str,
    catalog: Optional[Catalog] = None,
    config: EditorConfig = DEFAULT_CONFIG,
    diagnostics: Optional[EditorDiagnostics] = None,
) -> DecodeResult:
    """Like :func:`decode`, but failures come back in the result."""
    if diagnostics is None:
        diagnostics = EditorDiagnostics()
        diagnostics.default_stage = "codec"
    try:
        document = decode(raw, catalog, diagnostics, config)
    except BlueprintStringError as e:
        logger.info("Decode failed: %s", e)
        return DecodeResult(error=e, diagnostics=diagnostics.get_messages())
    return DecodeResult(value=document, diagnostics=diagnostics.get_messages())


def try_encode(document: Document, config: EditorConfig = DEFAULT_CONFIG) -> EncodeResult:
    try:
        return EncodeResult(value=encode(document, config))
    except EncodeError as e:
        logger.info("Encode failed: %s", e)
        return EncodeResult(error=e)


async def decode_async(
    raw: str,
    catalog: Optional[Catalog] = None,
    config: EditorConfig = DEFAULT_CONFIG,
) -> DecodeResult:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(try_decode, raw, catalog, config))


async def encode_async(
    document: Document, config: EditorConfig = DEFAULT_CONFIG
) -> EncodeResult:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(try_encode, document, config))
