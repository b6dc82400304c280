from __future__ import annotations

from typing import Iterable, Tuple


class BinprofError(Exception):
    """Root of every error raised while loading or decoding a profiler log."""


class ContainerError(BinprofError, OSError):
    """The compressed container could not be decompressed."""


class FormatError(BinprofError, ValueError):
    """The decompressed payload violates the BinaryLegionProf format."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (at byte 0x{offset:X})"
        super().__init__(message)

    def __reduce__(self):
        # Subclass constructors take structured arguments, not the message;
        # rebuild from state so errors survive process-pool boundaries.
        return _rebuild_format_error, (type(self), str(self), dict(self.__dict__))


def _rebuild_format_error(cls, message, state):
    error = cls.__new__(cls)
    Exception.__init__(error, message)
    error.__dict__.update(state)
    return error


class VersionError(FormatError):
    def __init__(self, version: Tuple[int, int], *, offset: int | None = None) -> None:
        self.version = version
        super().__init__(
            f"unsupported BinaryLegionProf version {version[0]}.{version[1]}",
            offset=offset,
        )


class HeaderSyntaxError(FormatError):
    def __init__(self, message: str, *, line: bytes = b"", offset: int | None = None) -> None:
        self.line = line
        if line:
            message = f"{message}: {line[:80]!r}"
        super().__init__(message, offset=offset)


class UnknownValueFormatError(FormatError):
    def __init__(self, token: str, *, offset: int | None = None) -> None:
        self.token = token
        super().__init__(f"unknown field type {token!r}", offset=offset)


class MissingRecordFormatError(FormatError):
    """The header does not declare a record kind the decoder requires."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(names)
        super().__init__("header is missing record formats: " + ", ".join(self.names))


class ShortReadError(FormatError):
    def __init__(self, needed: int, available: int, *, offset: int | None = None) -> None:
        self.needed = needed
        self.available = available
        super().__init__(f"need {needed} bytes, only {available} left", offset=offset)


class InvalidStringError(FormatError):
    pass


class DimensionError(FormatError):
    """An Array/Point field was decoded without a usable dimensionality."""

    def __init__(self, max_dim: int | None, *, offset: int | None = None) -> None:
        self.max_dim = max_dim
        if max_dim is None:
            message = "dimensionality is not known yet (no MaxDimDesc before this record)"
        else:
            message = f"negative dimensionality {max_dim}"
        super().__init__(message, offset=offset)


class UnknownRecordTagError(FormatError):
    def __init__(self, tag: int, *, offset: int | None = None) -> None:
        self.tag = tag
        super().__init__(f"record tag {tag} is not bound to a decoder", offset=offset)


class TrailingBytesError(FormatError):
    def __init__(self, remaining: int, *, offset: int | None = None) -> None:
        self.remaining = remaining
        super().__init__(f"{remaining} undecoded bytes after the last record", offset=offset)
