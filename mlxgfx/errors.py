"""Error codes and the exception raised for library failures."""

from __future__ import annotations

from enum import IntEnum


class MlxErrno(IntEnum):
    """Codes identifying what went wrong."""

    SUCCESS = 0
    INVEXT = 1
    INVFILE = 2
    INVPNG = 3
    INVXPM = 4
    INVPOS = 5
    INVDIM = 6
    INVIMG = 7
    VERTFAIL = 8
    FRAGFAIL = 9
    SHDRFAIL = 10
    MEMFAIL = 11
    GLADFAIL = 12
    GLFWFAIL = 13
    WINFAIL = 14
    STRTOOBIG = 15


_MESSAGES = {
    MlxErrno.SUCCESS: "No Errors",
    MlxErrno.INVEXT: "File has invalid extension",
    MlxErrno.INVFILE: "Failed to open the file",
    MlxErrno.INVPNG: "PNG file is invalid or corrupted",
    MlxErrno.INVXPM: "XPM42 file is invalid or corrupted",
    MlxErrno.INVPOS: "The specified X or Y positions are out of bounds",
    MlxErrno.INVDIM: "The specified Width or Height dimensions are out of bounds",
    MlxErrno.INVIMG: "The provided image is invalid, might indicate mismanagement of images",
    MlxErrno.VERTFAIL: "Failed to compile the vertex shader.",
    MlxErrno.FRAGFAIL: "Failed to compile the fragment shader.",
    MlxErrno.SHDRFAIL: "Failed to compile the shaders.",
    MlxErrno.MEMFAIL: "Failed to allocate memory",
    MlxErrno.GLADFAIL: "Failed to initialize GLAD",
    MlxErrno.GLFWFAIL: "Failed to initialize GLFW",
    MlxErrno.WINFAIL: "Failed to create window",
    MlxErrno.STRTOOBIG: "String is too big to be drawn",
}


def _as_errno(code: int) -> MlxErrno:
    try:
        return MlxErrno(code)
    except ValueError:
        raise ValueError(f"error code out of range: {code!r}") from None


def strerror(code: int) -> str:
    """Return the English description of an error code."""
    return _MESSAGES[_as_errno(code)]


class MlxError(Exception):
    """Raised when a library operation fails; carries the error code."""

    def __init__(self, code: int) -> None:
        self.code = _as_errno(code)
        super().__init__(strerror(self.code))