from __future__ import annotations


class CommandError(Exception):
    """Base class for every failure the router hands to its error handlers."""


class CommandNotFound(CommandError):
    pass


class CommandBlank(CommandError):
    pass


class IncorrectPermissions(CommandError):
    pass


class CommandOnCooldown(CommandError):
    pass


class InvalidArgCount(CommandError):
    pass


class InvalidTransformation(CommandError):
    """Raised by conversion functions when an argument cannot be transformed."""

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description


class PanicError(CommandError):
    """A handler or pipeline step raised something that was not a CommandError."""

    def __init__(self, message: str, original: BaseException | None = None) -> None:
        super().__init__(message)
        self.original = original


class MiddlewareFailed(CommandError):
    """
    Carries an error raised or returned by a middleware step that is not itself a
    CommandError. The router hands `error` to the error handlers unchanged.
    """

    def __init__(self, error: Exception) -> None:
        super().__init__(str(error) or type(error).__name__)
        self.error = error
