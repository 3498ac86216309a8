"""
ZIP Packager
============

Packs a document and every file it references into a single ZIP container.

Container layout:

    source.emmm          -- UTF-8 document, file: tokens rewritten to asset:
    assets/
      <identifier>       -- one entry per referenced file
"""

import zipfile
from pathlib import Path
from typing import Optional, Union
import logging

from emmm_core.config.settings import ArchiveConfig
from emmm_core.errors import ResourceIOError
from emmm_core.mapping.reference_rewriter import ReferenceRewriter
from emmm_core.packaging.base import BasePackager, PackageResult, Progress
from emmm_core.progress import as_sink, emit

logger = logging.getLogger(__name__)


class ArchivePackager(BasePackager):
    """
    ZIP-based document packager.

    Example:
        packager = ArchivePackager()
        result = packager.pack(
            "see file:/tmp/a.png;",
            Path("doc.zip"),
            progress=lambda f: print(f"{f:.0%}"),
        )
        result.name_map   # {"a.png": "/tmp/a.png"}
    """

    def __init__(self, config: Optional[ArchiveConfig] = None):
        """
        Initialize ZIP packager.

        Args:
            config: Container layout and compression settings
        """
        self.config = config or ArchiveConfig()

    def pack(self,
             document_text: str,
             destination_path: Union[str, Path],
             progress: Progress = None) -> PackageResult:
        """
        Create a ZIP container from a document.

        A failure to read any referenced file aborts the call. The partially
        written container is left on disk.

        Args:
            document_text: Document containing file: tokens
            destination_path: Path for the output ZIP
            progress: Sink or callable receiving (assets written) / (total)

        Returns:
            PackageResult with packaging outcome

        Raises:
            ResourceIOError: If the container or a referenced file cannot
                be opened, read or written
        """
        sink = as_sink(progress)
        destination_path = Path(destination_path)

        rewritten = ReferenceRewriter().to_assets(document_text)
        name_map = rewritten.name_map
        result = PackageResult(
            output_path=destination_path,
            name_map=name_map.to_dict(),
            diagnostics=rewritten.diagnostics,
        )

        logger.info(f"Packing {len(name_map)} asset(s) into {destination_path}")

        try:
            zf = zipfile.ZipFile(
                destination_path, 'w', zipfile.ZIP_DEFLATED,
                compresslevel=self.config.compression_level,
            )
        except OSError as e:
            raise ResourceIOError(destination_path, str(e)) from e

        with zf:
            try:
                zf.writestr(self.config.document_entry, rewritten.text.encode('utf-8'))
                zf.writestr(self._directory_entry(self.config.assets_dir), b'')
            except OSError as e:
                raise ResourceIOError(destination_path, str(e)) from e

            total = len(name_map)
            for identifier, source_path in name_map.items():
                try:
                    content = Path(source_path).read_bytes()
                except OSError as e:
                    logger.error(f"Failed to read {source_path}: {e}")
                    raise ResourceIOError(source_path, str(e)) from e

                arcname = f"{self.config.assets_dir}/{identifier}"
                try:
                    zf.writestr(arcname, content)
                except OSError as e:
                    raise ResourceIOError(destination_path, str(e)) from e

                result.assets_packaged += 1
                logger.debug(f"Packaged asset: {source_path} -> {arcname}")
                emit(sink, result.assets_packaged / total)

        result.total_size_bytes = destination_path.stat().st_size
        logger.info(f"Created package: {destination_path} ({result.total_size_bytes} bytes)")
        return result

    @staticmethod
    def _directory_entry(name: str) -> zipfile.ZipInfo:
        """Build a ZipInfo describing an empty directory entry."""
        info = zipfile.ZipInfo(name.rstrip('/') + '/')
        info.external_attr = (0o40775 << 16) | 0x10
        return info


def pack(document_text: str,
         destination_path: Union[str, Path],
         progress: Progress = None,
         config: Optional[ArchiveConfig] = None) -> PackageResult:
    """Pack document_text into a container at destination_path."""
    return ArchivePackager(config).pack(document_text, destination_path, progress)
