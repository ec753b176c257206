"""Exception types raised by tsreview."""


class TsReviewError(Exception):
    """Base class for all tsreview errors."""


class ConfigError(TsReviewError):
    """Invalid or unreadable configuration."""


class SourceError(TsReviewError):
    """A source path could not be resolved or read."""


class LexError(TsReviewError):
    """A source file could not be tokenized."""

    def __init__(self, message: str, line: int = 0):
        super().__init__(message)
        self.line = line

    def __str__(self) -> str:
        if self.line:
            return f"line {self.line}: {self.args[0]}"
        return self.args[0]
