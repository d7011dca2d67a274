"""Error taxonomy for the mirror and lookup paths."""

from __future__ import annotations

from pathlib import Path


class MirrorError(Exception):
    """Base for every error raised by the mirror manager and lookup service.

    Wraps the underlying exception (if any) as ``__cause__`` so callers can
    still inspect it, while branching on the subclass.
    """

    def __init__(self, operation: str, message: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class TransportError(MirrorError):
    """Network, clone or fetch failure."""


class RepositoryStateError(MirrorError):
    """Missing or corrupt reference/marker, or an inconsistent repository."""


class MirrorIOError(MirrorError):
    """Filesystem create/read failure, including an unresolvable state dir."""


class NotFoundError(MirrorError):
    """The requested ASN has no file in the mirror."""

    def __init__(self, asn: int, path: Path, cause: BaseException | None = None) -> None:
        self.asn = asn
        self.path = path
        super().__init__("lookup", f"ASN {asn} not found in mirror ({path})", cause)


class ParseError(MirrorError):
    """File content does not match the ASNInfo structure."""

    def __init__(self, path: Path | None, detail: str, cause: BaseException | None = None) -> None:
        self.path = path
        location = f" in {path}" if path is not None else ""
        super().__init__("parse", f"Failed to parse ASN data{location}: {detail}", cause)
