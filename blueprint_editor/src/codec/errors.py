from typing import Iterable, Tuple

from blueprint_editor.src.common.exceptions import BlueprintError

"""Interchange string codec exceptions."""


class BlueprintStringError(BlueprintError):
    """Base class for decode failures."""


class InvalidFormatError(BlueprintStringError):
    """The string is not a well-formed blueprint or book."""


class UnsupportedBlueprintError(BlueprintStringError):
    """The document references kinds this editor cannot represent."""

    template = "Blueprint contains unsupported kinds: {}"

    def __init__(self, kinds: Iterable[str]) -> None:
        self.kinds: Tuple[str, ...] = tuple(kinds)
        super().__init__(self.template.format(", ".join(self.kinds)))


class UnsupportedTrainBlueprintError(UnsupportedBlueprintError):
    """Train family kinds (locomotives, wagons, rails, signals, stops)."""

    template = "Blueprint contains train entities: {}"


class UnsupportedModdedContentError(UnsupportedBlueprintError):
    """Kinds that are not part of the loaded game data."""

    template = "Blueprint contains modded content: {}"


class EncodeError(BlueprintError):
    """A document could not be turned into an interchange string."""
