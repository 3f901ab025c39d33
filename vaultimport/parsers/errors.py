"""Structural reader errors."""


class ImportFileError(Exception):
    """
    Raised when a whole file cannot be imported.

    Covers empty files, unrecognized formats and missing required
    columns. No rows of the file are processed.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
