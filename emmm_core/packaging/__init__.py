"""
Packaging Framework
===================

Creates and extracts document containers.

Components:
- BasePackager / BaseUnpackager: Abstract interfaces
- PackageResult / UnpackResult: Containers for results
- ArchivePackager: ZIP packaging
- ArchiveUnpackager: ZIP extraction
"""

from emmm_core.packaging.base import (
    BasePackager,
    BaseUnpackager,
    PackageResult,
    UnpackResult,
    safe_entry_path,
)

from emmm_core.packaging.zip_packager import (
    ArchivePackager,
    pack,
)

from emmm_core.packaging.zip_unpackager import (
    ArchiveUnpackager,
    unpack,
)

__all__ = [
    # Base classes
    "BasePackager",
    "BaseUnpackager",
    "PackageResult",
    "UnpackResult",
    "safe_entry_path",
    # ZIP packaging
    "ArchivePackager",
    "ArchiveUnpackager",
    "pack",
    "unpack",
]
