"""
Image Module
============

Size-bounded image transcoding.
"""

from emmm_core.imaging.encoder import (
    CompressionTrial,
    EncodedImage,
    SizeBoundedImageEncoder,
    encode,
)

__all__ = [
    "CompressionTrial",
    "EncodedImage",
    "SizeBoundedImageEncoder",
    "encode",
]
