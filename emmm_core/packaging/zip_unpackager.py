"""
ZIP Unpackager
==============

Extracts a container produced by ArchivePackager and restores absolute
file: references in its document.
"""

import shutil
import zipfile
from pathlib import Path, PurePosixPath
from typing import Optional, Union
import logging

from emmm_core.config.settings import ArchiveConfig
from emmm_core.errors import ArchiveFormatError, ResourceIOError
from emmm_core.mapping.reference_rewriter import NameMap, ReferenceRewriter
from emmm_core.packaging.base import (
    BaseUnpackager,
    Progress,
    UnpackResult,
    safe_entry_path,
)
from emmm_core.progress import as_sink, emit

logger = logging.getLogger(__name__)


class ArchiveUnpackager(BaseUnpackager):
    """
    ZIP-based document unpackager.

    Every file entry is written flat into the output directory under its
    base name. Entries whose names would escape the output directory are
    rejected and reported in the diagnostics.

    Example:
        result = ArchiveUnpackager().unpack(Path("doc.zip"), Path("out/"))
        result.document   # "see file:/abs/out/a.png;"
    """

    def __init__(self, config: Optional[ArchiveConfig] = None):
        self.config = config or ArchiveConfig()

    def unpack(self,
               source_path: Union[str, Path],
               output_dir: Union[str, Path],
               progress: Progress = None) -> UnpackResult:
        """
        Extract a ZIP container and restore its document.

        Any I/O failure aborts the call. Files already extracted are left
        on disk.

        Args:
            source_path: Path to the container
            output_dir: Existing directory to extract assets into
            progress: Sink or callable receiving (entries processed) / (total)

        Returns:
            UnpackResult carrying the restored document text

        Raises:
            ResourceIOError: If the container, the output directory or an
                extracted file cannot be accessed
            ArchiveFormatError: If the container is not a ZIP file or its
                document entry is missing or not UTF-8
        """
        sink = as_sink(progress)
        source_path = Path(source_path)
        base_dir = self._resolve_output_dir(output_dir)

        try:
            zf = zipfile.ZipFile(source_path, 'r')
        except zipfile.BadZipFile as e:
            raise ArchiveFormatError(f"Not a valid container: {source_path}: {e}") from e
        except OSError as e:
            raise ResourceIOError(source_path, str(e)) from e

        name_map = NameMap()
        result = UnpackResult(output_dir=base_dir)
        document_path = PurePosixPath(self.config.document_entry)

        with zf:
            entries = zf.infolist()
            total = len(entries)
            logger.info(f"Unpacking {total} entr(ies) from {source_path} into {base_dir}")

            for index, info in enumerate(entries, start=1):
                entry_path = safe_entry_path(info.filename)

                if info.is_dir():
                    logger.debug(f"skipping {info.filename}")
                elif entry_path is None or not entry_path.name:
                    message = f"rejected unsafe entry: {info.filename}"
                    logger.warning(message)
                    result.diagnostics.append(message)
                elif entry_path == document_path:
                    logger.debug(f"skipping {info.filename}")
                else:
                    destination = base_dir / entry_path.name
                    self._extract_entry(zf, info, destination)
                    name_map.add(entry_path.name, str(destination))
                    result.entries_extracted += 1
                    logger.debug(f"copied {info.filename}")

                emit(sink, index / total)

            source = self._read_document(zf, source_path)

        rewritten = ReferenceRewriter(name_map).to_files(source)
        result.document = rewritten.text
        result.name_map = name_map.to_dict()
        result.diagnostics.extend(rewritten.diagnostics)

        logger.info(f"Unpacked {result.entries_extracted} file(s) from {source_path}")
        return result

    @staticmethod
    def _resolve_output_dir(output_dir: Union[str, Path]) -> Path:
        try:
            base_dir = Path(output_dir).resolve(strict=True)
        except OSError as e:
            raise ResourceIOError(output_dir, str(e)) from e
        if not base_dir.is_dir():
            raise ResourceIOError(output_dir, "not a directory")
        return base_dir

    @staticmethod
    def _extract_entry(zf: zipfile.ZipFile,
                       info: zipfile.ZipInfo,
                       destination: Path) -> None:
        """Stream one entry's bytes to destination."""
        try:
            with zf.open(info) as src, open(destination, 'wb') as dst:
                shutil.copyfileobj(src, dst)
        except zipfile.BadZipFile as e:
            raise ArchiveFormatError(f"Corrupt entry {info.filename}: {e}") from e
        except OSError as e:
            raise ResourceIOError(destination, str(e)) from e

    def _read_document(self, zf: zipfile.ZipFile, source_path: Path) -> str:
        try:
            raw = zf.read(self.config.document_entry)
        except KeyError as e:
            raise ArchiveFormatError(
                f"{self.config.document_entry} not found in {source_path}"
            ) from e
        except zipfile.BadZipFile as e:
            raise ArchiveFormatError(f"Corrupt document entry in {source_path}: {e}") from e

        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ArchiveFormatError(
                f"{self.config.document_entry} in {source_path} is not UTF-8: {e}"
            ) from e


def unpack(source_path: Union[str, Path],
           output_dir: Union[str, Path],
           progress: Progress = None,
           config: Optional[ArchiveConfig] = None) -> UnpackResult:
    """Unpack the container at source_path into output_dir."""
    return ArchiveUnpackager(config).unpack(source_path, output_dir, progress)
