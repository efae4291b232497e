"""Base exception for the editor core."""


class BlueprintError(Exception):
    """Base class for every error raised by the editor core."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
