"""
Worker Dispatch
===============

Runs pack, unpack and encode operations on a dedicated worker thread while
the calling thread waits for the outcome.

Application errors (EmmmCoreError, ValueError) are re-raised to the caller
unchanged. Anything else that goes wrong, including a failure to hand the
operation to the worker, is raised as WorkerError.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, Union

from emmm_core.config.settings import CoreConfig
from emmm_core.errors import EmmmCoreError, WorkerError
from emmm_core.imaging.encoder import EncodedImage, SizeBoundedImageEncoder
from emmm_core.packaging.base import PackageResult, Progress, UnpackResult
from emmm_core.packaging.zip_packager import ArchivePackager
from emmm_core.packaging.zip_unpackager import ArchiveUnpackager

logger = logging.getLogger(__name__)

APPLICATION_ERRORS = (EmmmCoreError, ValueError)


class Worker:
    """
    Single-thread worker for archive and image operations.

    Each call blocks until its operation finishes. Operations never share
    state, so nothing here is locked. Concurrent calls against the same
    destination path must be serialized by the caller.

    Example:
        with Worker() as worker:
            worker.pack(text, Path("doc.zip"), progress=print)
            restored = worker.unpack(Path("doc.zip"), Path("out")).document
    """

    def __init__(self, config: Optional[CoreConfig] = None):
        self.config = config or CoreConfig()
        self.packager = ArchivePackager(self.config.archive)
        self.unpackager = ArchiveUnpackager(self.config.archive)
        self.encoder = SizeBoundedImageEncoder(self.config.encoder)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="emmm-worker")

    def run(self, operation: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run operation on the worker thread and wait for its result.

        Raises:
            EmmmCoreError, ValueError: When the operation itself fails
            WorkerError: When the worker could not run the operation
        """
        name = getattr(operation, "__name__", repr(operation))
        try:
            future = self._executor.submit(operation, *args, **kwargs)
        except RuntimeError as e:
            raise WorkerError(f"Could not dispatch {name}: {e}") from e

        try:
            return future.result()
        except APPLICATION_ERRORS:
            raise
        except WorkerError:
            raise
        except Exception as e:
            logger.error(f"Worker failed while running {name}: {e}", exc_info=True)
            raise WorkerError(f"Worker failed while running {name}: {e}") from e

    def pack(self,
             document_text: str,
             destination_path: Union[str, Path],
             progress: Progress = None) -> PackageResult:
        return self.run(self.packager.pack, document_text, destination_path, progress)

    def unpack(self,
               source_path: Union[str, Path],
               output_dir: Union[str, Path],
               progress: Progress = None) -> UnpackResult:
        return self.run(self.unpackager.unpack, source_path, output_dir, progress)

    def encode(self,
               image_bytes: bytes,
               max_size: int,
               max_width: Optional[int] = None,
               accepted_mime_types: Optional[Sequence[str]] = None) -> EncodedImage:
        return self.run(self.encoder.encode, image_bytes, max_size, max_width,
                        accepted_mime_types)

    def encode_file(self,
                    path: Union[str, Path],
                    out_path: Union[str, Path],
                    max_size: int,
                    max_width: Optional[int] = None) -> EncodedImage:
        return self.run(self.encoder.encode_file, path, out_path, max_size, max_width)

    def shutdown(self) -> None:
        """Wait for the running operation, then stop the worker thread."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "Worker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
