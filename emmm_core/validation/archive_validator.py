"""
Archive Validator
=================

Checks that a container honours its layout: one UTF-8 document entry, and a
one-to-one match between asset: tokens in the document and entries under
the assets directory.
"""

import zipfile
from pathlib import Path
from typing import Optional, Set, Union
import logging

from emmm_core.config.settings import ArchiveConfig
from emmm_core.mapping.reference_rewriter import find_asset_identifiers
from emmm_core.packaging.base import safe_entry_path
from emmm_core.validation.base import BaseValidator, ValidationResult

logger = logging.getLogger(__name__)


class ArchiveValidator(BaseValidator):
    """
    Validates ZIP containers written by ArchivePackager.

    Missing assets, unsafe entry names and a missing or undecodable document
    are errors. Assets no token refers to are warnings.

    Example:
        result = ArchiveValidator().validate_package(Path("doc.zip"))
        print(result.summary())
    """

    def __init__(self, config: Optional[ArchiveConfig] = None):
        self.config = config or ArchiveConfig()

    def validate_package(self, package_path: Union[str, Path]) -> ValidationResult:
        package_path = Path(package_path)
        result = ValidationResult()
        result.metadata['package'] = str(package_path)

        try:
            zf = zipfile.ZipFile(package_path, 'r')
        except (zipfile.BadZipFile, OSError) as e:
            result.add_error(package_path.name, f"Cannot open container: {e}",
                             error_type="Unreadable Container")
            return result

        assets_prefix = self.config.assets_dir.rstrip('/') + '/'
        stored: Set[str] = set()

        with zf:
            for info in zf.infolist():
                if safe_entry_path(info.filename) is None:
                    result.add_error(info.filename, f"Entry escapes the container: {info.filename}",
                                     error_type="Unsafe Entry")
                    continue
                if info.is_dir():
                    continue
                if info.filename.startswith(assets_prefix):
                    stored.add(info.filename[len(assets_prefix):])
                elif info.filename != self.config.document_entry:
                    result.add_error(info.filename, f"Unexpected entry: {info.filename}",
                                     error_type="Unexpected Entry", severity="Warning")

            try:
                document = zf.read(self.config.document_entry).decode('utf-8')
            except KeyError:
                result.add_error(self.config.document_entry, "Document entry is missing",
                                 error_type="Missing Document")
                return result
            except (zipfile.BadZipFile, UnicodeDecodeError) as e:
                result.add_error(self.config.document_entry, f"Document is unreadable: {e}",
                                 error_type="Unreadable Document")
                return result

        referenced = set(find_asset_identifiers(document))
        result.metadata['referenced_assets'] = len(referenced)
        result.metadata['stored_assets'] = len(stored)

        for identifier in sorted(referenced - stored):
            result.add_error(f"{assets_prefix}{identifier}",
                             f"Referenced asset has no entry: {identifier}",
                             error_type="Missing Asset")

        for identifier in sorted(stored - referenced):
            result.add_error(f"{assets_prefix}{identifier}",
                             f"Asset is never referenced: {identifier}",
                             error_type="Unreferenced Asset", severity="Warning")

        logger.info(f"Validated {package_path}: {result.error_count} error(s), "
                    f"{result.warning_count} warning(s)")
        return result
