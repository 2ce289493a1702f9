"""
Pre-flight file admission.

Checks the declared size, name and media type of a candidate file before
any byte of it is parsed. Every rule is evaluated so that all reasons are
reported together.
"""

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

from crimeingest.config.settings import MIB, IngestConfig
from crimeingest.errors import AdmissionError
from crimeingest.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class FileDescriptor:
    """Declared properties of a candidate file."""

    name: str
    size: int
    media_type: str = ""

    @classmethod
    def from_path(cls, path: Path, media_type: str | None = None) -> "FileDescriptor":
        """
        Describe a file on disk.

        The media type is guessed from the file name unless given.

        Raises:
            FileNotFoundError: If the path does not exist.
        """
        if not path.exists():
            msg = f"File not found: {path}"
            raise FileNotFoundError(msg)
        if media_type is None:
            media_type = mimetypes.guess_type(path.name)[0] or ""
        return cls(name=path.name, size=path.stat().st_size, media_type=media_type)


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of the admission checks."""

    valid: bool
    errors: list[str] = field(default_factory=list)


def check_admission(descriptor: FileDescriptor, config: IngestConfig | None = None) -> AdmissionResult:
    """
    Evaluate every admission rule against a file descriptor.

    The extension is authoritative: a file with the accepted extension passes
    the media type rule whatever type it declares.

    Args:
        descriptor: Declared file properties.
        config: Limits and allow-lists, defaults when None.

    Returns:
        AdmissionResult with one reason per violated rule.
    """
    config = config or IngestConfig()
    errors: list[str] = []

    if descriptor.size > config.max_file_size:
        errors.append(
            f"File size ({descriptor.size / MIB:.2f}MB) exceeds maximum allowed size "
            f"({config.max_file_size_mb:.2f}MB)"
        )

    has_extension = descriptor.name.lower().endswith(config.accepted_extension)

    if descriptor.media_type not in config.accepted_media_types and not has_extension:
        errors.append(
            f'File type "{descriptor.media_type}" is not allowed. '
            f"Supported types: {', '.join(config.accepted_media_types)}"
        )

    if not has_extension:
        errors.append(f"File must have a {config.accepted_extension} extension")

    if errors:
        log.error("File rejected", file=descriptor.name, reasons=errors)
    else:
        log.debug("File admitted", file=descriptor.name, size=descriptor.size)

    return AdmissionResult(valid=not errors, errors=errors)


def ensure_admitted(descriptor: FileDescriptor, config: IngestConfig | None = None) -> None:
    """
    Raise when a file fails admission.

    Raises:
        AdmissionError: Carrying every violated rule.
    """
    result = check_admission(descriptor, config)
    if not result.valid:
        raise AdmissionError(result.errors)
