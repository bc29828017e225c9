"""Custom exceptions for archive inspection, merging and packaging."""


class ChatCombineError(Exception):
    """Base class for every error raised by chat_combine."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ArchiveDecodeError(ChatCombineError):
    """Raised when an archive's bytes cannot be read as a zip container.

    Fatal for one archive only; sibling inspections carry on.
    """

    def __init__(self, archive: str, message: str | None = None):
        self.archive = archive
        super().__init__(
            f"Error processing {archive}: {message}"
            if message
            else f"Error processing {archive}: not a readable zip archive"
        )


class MissingLogError(ChatCombineError):
    """Raised when an archive without a message log is handed to a merge stage."""

    def __init__(self, archive: str, reason: str | None = None):
        self.archive = archive
        self.reason = reason or "no message log found"
        super().__init__(f"{archive}: {self.reason}")


class IdentityMismatchError(ChatCombineError):
    def __init__(self, expected: object, actual: object, archive: str | None = None):
        self.expected = expected
        self.actual = actual
        self.archive = archive
        where = f" in {archive}" if archive else ""
        super().__init__(
            f"Chat ID mismatch{where}: {expected} !== {actual}. "
            "Cannot combine different chats."
        )


class LogParseError(ChatCombineError):
    def __init__(self, archive: str, detail: str | None = None):
        self.archive = archive
        self.detail = detail
        super().__init__(
            f"Error processing {archive}: {detail}"
            if detail
            else f"Error processing {archive}: message log is not valid JSON"
        )


class MissingSourceError(ChatCombineError):
    """Raised when an archive's raw bytes are gone by the time they are re-read."""

    def __init__(self, archive: str, key: str | None = None):
        self.archive = archive
        self.key = key
        super().__init__(f"Original file for {archive} is missing")


class InsufficientArchivesError(ChatCombineError):
    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"At least two valid exports are needed to combine, got {count}"
        )


class CombineError(ChatCombineError):
    """Top-level error for the combine entry point.

    The specific failure is kept as ``__cause__``.
    """

    pass


class UnknownProviderError(ValueError):
    """Raised when a registry is asked for a provider it does not know."""

    pass
