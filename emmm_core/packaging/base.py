"""
Base Packaging Classes
======================

Result containers and abstract interfaces shared by the packager and the
unpackager.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import List, Dict, Optional, Union
import logging
import re

from emmm_core.progress import ProgressCallback, ProgressSink

logger = logging.getLogger(__name__)

# Anything accepted where a progress sink is expected
Progress = Union[None, ProgressSink, ProgressCallback]

_DRIVE_RE = re.compile(r"^[A-Za-z]:")


@dataclass
class PackageResult:
    """
    Container for packaging results.

    Attributes:
        output_path: Path to the created container
        assets_packaged: Number of asset entries written
        total_size_bytes: Container size on disk
        name_map: Identifier -> source path for every packaged asset
        diagnostics: Tokens that were left unchanged
    """
    output_path: Optional[Path] = None
    assets_packaged: int = 0
    total_size_bytes: int = 0
    name_map: Dict[str, str] = field(default_factory=dict)
    diagnostics: List[str] = field(default_factory=list)

    def summary(self) -> str:
        """Generate a text summary of packaging results."""
        lines = [
            f"Output: {self.output_path}",
            f"Assets: {self.assets_packaged}",
        ]

        if self.total_size_bytes > 0:
            size_kb = self.total_size_bytes / 1024
            lines.append(f"Size: {size_kb:.1f} KB")

        if self.diagnostics:
            lines.append(f"\nUnchanged references ({len(self.diagnostics)}):")
            for message in self.diagnostics[:5]:
                lines.append(f"  - {message}")
            if len(self.diagnostics) > 5:
                lines.append(f"  ... and {len(self.diagnostics) - 5} more")

        return "\n".join(lines)


@dataclass
class UnpackResult:
    """
    Container for unpacking results.

    Attributes:
        document: Restored document text
        output_dir: Absolute directory the assets were extracted to
        entries_extracted: Number of files written to output_dir
        name_map: Identifier -> destination path for every extracted file
        diagnostics: Unresolved tokens and rejected entries
    """
    document: str = ""
    output_dir: Optional[Path] = None
    entries_extracted: int = 0
    name_map: Dict[str, str] = field(default_factory=dict)
    diagnostics: List[str] = field(default_factory=list)

    def summary(self) -> str:
        """Generate a text summary of unpacking results."""
        lines = [
            f"Output directory: {self.output_dir}",
            f"Files extracted: {self.entries_extracted}",
        ]

        if self.diagnostics:
            lines.append(f"\nDiagnostics ({len(self.diagnostics)}):")
            for message in self.diagnostics[:5]:
                lines.append(f"  - {message}")
            if len(self.diagnostics) > 5:
                lines.append(f"  ... and {len(self.diagnostics) - 5} more")

        return "\n".join(lines)


def safe_entry_path(entry_name: str) -> Optional[PurePosixPath]:
    """
    Interpret a container entry name as a relative path.

    Args:
        entry_name: Raw entry name from the container

    Returns:
        The relative path, or None if the name is absolute, carries a drive
        letter, or walks upwards with '..'
    """
    normalized = entry_name.replace("\\", "/")
    if not normalized or normalized.startswith("/") or _DRIVE_RE.match(normalized):
        return None
    if "\x00" in normalized:
        return None

    path = PurePosixPath(normalized)
    if any(part == ".." for part in path.parts):
        return None
    return path


class BasePackager(ABC):
    """
    Abstract base class for document packagers.

    Subclass this to write containers in a different format.
    """

    @abstractmethod
    def pack(self,
             document_text: str,
             destination_path: Union[str, Path],
             progress: Progress = None) -> PackageResult:
        """
        Create a container from a document and the files it references.

        Args:
            document_text: Document containing file: tokens
            destination_path: Path for the container
            progress: Optional sink receiving one fraction per asset

        Returns:
            PackageResult with packaging outcome
        """
        pass


class BaseUnpackager(ABC):
    """Abstract base class for document unpackagers."""

    @abstractmethod
    def unpack(self,
               source_path: Union[str, Path],
               output_dir: Union[str, Path],
               progress: Progress = None) -> UnpackResult:
        """
        Extract a container and restore its document.

        Args:
            source_path: Path to the container
            output_dir: Existing directory to extract assets into
            progress: Optional sink receiving one fraction per entry

        Returns:
            UnpackResult carrying the restored document text
        """
        pass
