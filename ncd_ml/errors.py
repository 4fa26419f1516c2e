"""Exception types raised by the NCD engine and its collaborators."""

from __future__ import annotations

from os import PathLike
from typing import Optional, Union


class NCDError(Exception):
    """Base class for every error raised by ``ncd_ml``."""


class InvalidInputError(NCDError, ValueError):
    """Empty batch, empty input or an argument outside its domain."""


class SourceIOError(NCDError, OSError):
    """A file item could not be opened or read."""

    def __init__(self, path: Union[str, PathLike], message: Optional[str] = None) -> None:
        self.path = str(path)
        super().__init__(message or f"file can not be opened: {self.path}")

    def __str__(self) -> str:
        return self.args[0]
