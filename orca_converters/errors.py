"""Exceptions raised while converting profiles."""


class ConversionError(Exception):
    """A single profile could not be converted. The batch continues with the next one."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class OutputDirectoryError(Exception):
    """The output directory is missing or not writable. Nothing more can be written."""


class QuitRequested(Exception):
    """The user chose <QUIT> in an interactive menu."""
