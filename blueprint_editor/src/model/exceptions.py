from typing import Iterable, Optional

from blueprint_editor.src.common.exceptions import BlueprintError

"""Entity graph and document model exceptions."""


class PlacementConflictError(BlueprintError):
    """A placement would overlap another entity or leave the document bounds."""

    def __init__(
        self,
        message: str,
        entity_id: Optional[int] = None,
        blockers: Iterable[int] = (),
        out_of_bounds: bool = False,
    ) -> None:
        self.entity_id = entity_id
        self.blockers = tuple(sorted(blockers))
        self.out_of_bounds = out_of_bounds
        super().__init__(message)


class UnknownEntityIdError(BlueprintError):
    """An operation referenced an identifier absent from the graph."""

    def __init__(self, entity_id: int) -> None:
        self.entity_id = entity_id
        super().__init__(f"No entity with id {entity_id}")


class InvalidDirectionError(BlueprintError):
    """A direction is not valid for the entity's kind."""


class InvalidConnectionError(BlueprintError):
    """Two entities cannot be linked the requested way."""


class IncompatibleSettingsError(BlueprintError):
    """Settings were pasted between entities of different families."""

    def __init__(self, source_id: int, target_id: int, message: str) -> None:
        self.source_id = source_id
        self.target_id = target_id
        super().__init__(message)


class PropertyError(BlueprintError):
    """A property key or value does not fit the entity's family schema."""

    def __init__(self, entity_id: Optional[int], key: str, reason: str) -> None:
        self.entity_id = entity_id
        self.key = key
        self.reason = reason
        super().__init__(reason)
