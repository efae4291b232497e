"""Interchange string codec for blueprints and books."""

from .bp_string import (
    DecodeResult,
    EncodeResult,
    decode,
    decode_async,
    decode_payload,
    encode,
    encode_async,
    is_empty,
    try_decode,
    try_encode,
)
from .errors import (
    BlueprintStringError,
    EncodeError,
    InvalidFormatError,
    UnsupportedBlueprintError,
    UnsupportedModdedContentError,
    UnsupportedTrainBlueprintError,
)
from .serializer import document_from_dict, document_to_dict

__all__ = [
    "decode",
    "encode",
    "is_empty",
    "try_decode",
    "try_encode",
    "decode_async",
    "encode_async",
    "decode_payload",
    "DecodeResult",
    "EncodeResult",
    "document_from_dict",
    "document_to_dict",
    "BlueprintStringError",
    "InvalidFormatError",
    "UnsupportedBlueprintError",
    "UnsupportedTrainBlueprintError",
    "UnsupportedModdedContentError",
    "EncodeError",
]
