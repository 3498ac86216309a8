"""
emmm Core Library
=================

Backend for a document editor that embeds external files by reference:

- Reference rewriting between file:<path> and asset:<identifier> tokens
- Packing a document and its referenced files into one ZIP container
- Unpacking a container and restoring absolute file: references
- Transcoding images to fit a byte budget
- Container validation
- A dedicated worker that runs the above off the caller's thread

Architecture
------------

    emmm_core/
    ├── mapping/       - Reference token rewriting and name maps
    ├── packaging/     - Container packing and unpacking
    ├── imaging/       - Size-bounded image encoding
    ├── validation/    - Container layout validation
    ├── config/        - Configuration management and logging setup
    ├── progress.py    - Progress sinks
    ├── errors.py      - Error taxonomy
    ├── worker.py      - Worker dispatch
    └── cli.py         - Command line front-end

Usage
-----

    from emmm_core import ArchivePackager, ArchiveUnpackager, SizeBoundedImageEncoder

    ArchivePackager().pack("see file:/tmp/a.png;", Path("doc.zip"))
    restored = ArchiveUnpackager().unpack(Path("doc.zip"), Path("out")).document

    jpeg = SizeBoundedImageEncoder().encode(raw, max_size=100 * 1024).data
"""

__version__ = "1.0.0"

from emmm_core.errors import (
    EmmmCoreError,
    ResourceIOError,
    DecodeError,
    ImageDecodeError,
    ArchiveFormatError,
    SizeLimitError,
    WorkerError,
    NotifierError,
)

from emmm_core.progress import (
    ProgressSink,
    CallbackProgressSink,
    QueueProgressSink,
    NullProgressSink,
)

from emmm_core.mapping.reference_rewriter import (
    NameMap,
    ReferenceRewriter,
    RewriteResult,
    rewrite_for_pack,
    rewrite_for_unpack,
)

from emmm_core.packaging import (
    ArchivePackager,
    ArchiveUnpackager,
    PackageResult,
    UnpackResult,
    pack,
    unpack,
)

from emmm_core.imaging.encoder import (
    CompressionTrial,
    EncodedImage,
    SizeBoundedImageEncoder,
    encode,
)

from emmm_core.validation import (
    ArchiveValidator,
    ValidationResult,
)

from emmm_core.config.settings import (
    CoreConfig,
    ArchiveConfig,
    EncoderConfig,
    load_config,
    save_config,
)

from emmm_core.worker import Worker

__all__ = [
    # Version
    "__version__",
    # Errors
    "EmmmCoreError",
    "ResourceIOError",
    "DecodeError",
    "ImageDecodeError",
    "ArchiveFormatError",
    "SizeLimitError",
    "WorkerError",
    "NotifierError",
    # Progress
    "ProgressSink",
    "CallbackProgressSink",
    "QueueProgressSink",
    "NullProgressSink",
    # Mapping
    "NameMap",
    "ReferenceRewriter",
    "RewriteResult",
    "rewrite_for_pack",
    "rewrite_for_unpack",
    # Packaging
    "ArchivePackager",
    "ArchiveUnpackager",
    "PackageResult",
    "UnpackResult",
    "pack",
    "unpack",
    # Imaging
    "CompressionTrial",
    "EncodedImage",
    "SizeBoundedImageEncoder",
    "encode",
    # Validation
    "ArchiveValidator",
    "ValidationResult",
    # Config
    "CoreConfig",
    "ArchiveConfig",
    "EncoderConfig",
    "load_config",
    "save_config",
    # Worker
    "Worker",
]
