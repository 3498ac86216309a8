"""
Size-Bounded Image Encoder
==========================

Transcodes an image so that its encoded size stays under a byte budget.

The image is decoded once. The encoder then tries, in order:

1. The original bytes, when the source type is already acceptable and the
   file is under budget.
2. One JPEG re-encode at the widest allowed scale.
3. A binary search over the spatial scale, keeping quality fixed, for a
   bounded number of rounds. A trial above the passable threshold
   (a fraction of the budget) ends the search early.

If no trial lands under the budget, SizeLimitError is raised. An oversized
result is never returned.
"""

import io
import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from PIL import Image, UnidentifiedImageError

from emmm_core.config.settings import EncoderConfig
from emmm_core.errors import ImageDecodeError, ResourceIOError, SizeLimitError

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "JPEG"
OUTPUT_MIME_TYPE = "image/jpeg"
OUTPUT_EXTENSION = "jpg"

_PREFERRED_EXTENSIONS = {
    "JPEG": "jpg",
    "PNG": "png",
    "GIF": "gif",
    "WEBP": "webp",
    "BMP": "bmp",
    "TIFF": "tiff",
}

_LENGTH = struct.Struct("<I")

# Multi-picture JPEGs (camera and phone output) are plain JPEG streams
_FORMAT_ALIASES = {
    "MPO": "JPEG",
}

_ALPHA_MODES = ("RGBA", "LA", "PA")


@dataclass
class CompressionTrial:
    """One (scale, resulting size) measurement taken during the search."""

    scale: float
    size: int


@dataclass
class EncodedImage:
    """
    Result of a size-bounded encode.

    Attributes:
        data: Encoded image bytes
        mime_type: MIME type of data
        extension: File extension for data, without the dot
        scale: Scale factor applied to the source dimensions
        reencoded: False when data is the untouched source
        trials: Measurements taken while searching
    """
    data: bytes
    mime_type: str
    extension: str
    scale: float = 1.0
    reencoded: bool = True
    trials: List[CompressionTrial] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        """
        Frame the result as a single blob.

            u32 LE mime length | mime | u32 LE extension length | extension | data
        """
        mime = self.mime_type.encode('utf-8')
        ext = self.extension.encode('utf-8')
        return b"".join([
            _LENGTH.pack(len(mime)), mime,
            _LENGTH.pack(len(ext)), ext,
            self.data,
        ])

    @classmethod
    def from_bytes(cls, blob: bytes) -> 'EncodedImage':
        """
        Parse a blob produced by to_bytes().

        Raises:
            ValueError: If the blob is truncated or a header is not UTF-8
        """
        mime, offset = _read_field(blob, 0, "mime type")
        ext, offset = _read_field(blob, offset, "extension")
        return cls(data=bytes(blob[offset:]), mime_type=mime, extension=ext)


def _read_field(blob: bytes, offset: int, label: str) -> Tuple[str, int]:
    if len(blob) < offset + _LENGTH.size:
        raise ValueError(f"Truncated frame: missing {label} length")
    (length,) = _LENGTH.unpack_from(blob, offset)
    start = offset + _LENGTH.size
    end = start + length
    if len(blob) < end:
        raise ValueError(f"Truncated frame: {label} needs {length} bytes")
    try:
        return blob[start:end].decode('utf-8'), end
    except UnicodeDecodeError as e:
        raise ValueError(f"Invalid {label} in frame: {e}") from e


def _extension_for(image_format: Optional[str]) -> str:
    if image_format in _PREFERRED_EXTENSIONS:
        return _PREFERRED_EXTENSIONS[image_format]
    for ext, fmt in Image.registered_extensions().items():
        if fmt == image_format:
            return ext.lstrip('.')
    return "bin"


def to_jpeg_mode(image: Image.Image) -> Image.Image:
    """Flatten transparency onto white and convert to a mode JPEG can store."""
    if image.mode in _ALPHA_MODES or (
            image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        flattened = Image.new("RGB", rgba.size, (255, 255, 255))
        flattened.paste(rgba, mask=rgba.getchannel("A"))
        return flattened
    if image.mode not in ("RGB", "L", "CMYK"):
        return image.convert("RGB")
    return image


class SizeBoundedImageEncoder:
    """
    Searches for a spatial scale whose JPEG encoding fits a byte budget.

    Example:
        encoder = SizeBoundedImageEncoder()
        result = encoder.encode(raw_bytes, max_size=100 * 1024, max_width=1920)
        blob = result.to_bytes()
    """

    def __init__(self, config: Optional[EncoderConfig] = None):
        self.config = config or EncoderConfig()

    def encode(self,
               image_bytes: bytes,
               max_size: int,
               max_width: Optional[int] = None,
               accepted_mime_types: Optional[Sequence[str]] = None) -> EncodedImage:
        """
        Encode an image under max_size bytes.

        Args:
            image_bytes: Source image in any format Pillow can decode
            max_size: Exclusive upper bound on the result size in bytes
            max_width: Optional upper bound on the result width in pixels
            accepted_mime_types: Source types that may be returned untouched;
                defaults to the configured list

        Returns:
            EncodedImage whose data is shorter than max_size

        Raises:
            ValueError: If max_size or max_width is not positive
            ImageDecodeError: If the image cannot be decoded
            SizeLimitError: If no trial fits the budget
        """
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        if max_width is not None and max_width <= 0:
            raise ValueError(f"max_width must be positive, got {max_width}")
        if accepted_mime_types is None:
            accepted_mime_types = self.config.accepted_mime_types

        logger.info("encode: start")
        image, source_format = self._decode(image_bytes)
        source_format = _FORMAT_ALIASES.get(source_format, source_format)
        source_mime = Image.MIME.get(source_format) if source_format else None
        logger.info(f"encode: decoded ({source_mime}, {image.width}x{image.height})")

        upper = 1.0
        if max_width is not None:
            upper = min(1.0, max_width / image.width)

        if source_mime in accepted_mime_types and len(image_bytes) < max_size:
            logger.info("encode: source already fits")
            return EncodedImage(
                data=bytes(image_bytes),
                mime_type=source_mime,
                extension=_extension_for(source_format),
                scale=1.0,
                reencoded=False,
            )

        trials: List[CompressionTrial] = []
        data = self._try_scale(image, upper, trials)
        if len(data) < max_size:
            logger.info("encode: single re-encode fits")
            return self._result(data, upper, trials)

        lower = self.config.min_scale
        if upper <= lower:
            logger.info(f"encode: width ceiling {upper:.4f} is below the minimum scale")
            raise SizeLimitError(max_size)

        passable = int(max_size * self.config.passable_ratio)
        best: Optional[Tuple[bytes, float]] = None

        for _ in range(self.config.search_rounds):
            guess = (lower + upper) / 2
            data = self._try_scale(image, guess, trials)
            if len(data) < max_size:
                best = (data, guess)
                lower = guess
                if len(data) > passable:
                    break
            else:
                upper = guess

        if best is None:
            logger.info(f"encode: no fit after {len(trials)} trial(s)")
            raise SizeLimitError(max_size)

        logger.info("encode: done")
        return self._result(best[0], best[1], trials)

    def encode_file(self,
                    path: Union[str, Path],
                    out_path: Union[str, Path],
                    max_size: int,
                    max_width: Optional[int] = None) -> EncodedImage:
        """
        Encode the image at path and write the result to out_path.

        Raises:
            ResourceIOError: If path cannot be read or out_path written
        """
        try:
            image_bytes = Path(path).read_bytes()
        except OSError as e:
            raise ResourceIOError(path, str(e)) from e

        result = self.encode(image_bytes, max_size, max_width)

        try:
            Path(out_path).write_bytes(result.data)
        except OSError as e:
            raise ResourceIOError(out_path, str(e)) from e
        return result

    @staticmethod
    def _decode(image_bytes: bytes) -> Tuple[Image.Image, Optional[str]]:
        """Decode once and bring the pixels into a JPEG-compatible mode."""
        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
            source_format = image.format
            image = to_jpeg_mode(image)
        except (UnidentifiedImageError, Image.DecompressionBombError,
                OSError, SyntaxError, ValueError) as e:
            raise ImageDecodeError(f"decode: {e}") from e

        return image, source_format

    def _try_scale(self,
                   image: Image.Image,
                   scale: float,
                   trials: List[CompressionTrial]) -> bytes:
        """Encode image at scale with the fixed quality and record the size."""
        width = max(1, round(image.width * scale))
        height = max(1, round(image.height * scale))

        scaled = image
        if (width, height) != image.size:
            logger.info(f"trial: resizing to {width}x{height}")
            scaled = image.resize((width, height), Image.Resampling.BILINEAR)

        logger.info("trial: encoding")
        out = io.BytesIO()
        scaled.save(out, format=OUTPUT_FORMAT, quality=self.config.quality)
        data = out.getvalue()

        trials.append(CompressionTrial(scale=scale, size=len(data)))
        logger.debug(f"trial scale={scale:.4f} size={len(data)}")
        return data

    @staticmethod
    def _result(data: bytes, scale: float, trials: List[CompressionTrial]) -> EncodedImage:
        return EncodedImage(
            data=data,
            mime_type=OUTPUT_MIME_TYPE,
            extension=OUTPUT_EXTENSION,
            scale=scale,
            reencoded=True,
            trials=trials,
        )


def encode(image_bytes: bytes,
           max_size: int,
           max_width: Optional[int] = None,
           accepted_mime_types: Optional[Sequence[str]] = None,
           config: Optional[EncoderConfig] = None) -> EncodedImage:
    """Encode image_bytes under max_size with a default-configured encoder."""
    return SizeBoundedImageEncoder(config).encode(
        image_bytes, max_size, max_width, accepted_mime_types)
