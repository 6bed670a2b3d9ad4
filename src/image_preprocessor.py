"""
Image preprocessing module for lottery ticket OCR.
Sharpens printed play lines before the image is handed to the OCR engine.
"""

import io
from typing import Optional

import numpy as np
from PIL import Image
from loguru import logger


class ImagePreprocessor:
    """Grayscale + contrast + threshold pipeline tuned for thermal-printed tickets."""

    def __init__(self, scale: float = 2.0, contrast: float = 1.35, threshold: int = 160):
        """
        Args:
            scale: Upscale factor applied first (sharper glyphs for OCR)
            contrast: Contrast stretch around mid-gray (128)
            threshold: Gray level above which a pixel becomes white
        """
        self.scale = scale
        self.contrast = contrast
        self.threshold = threshold

    def preprocess(self, image_data: bytes) -> bytes:
        """
        Prepare a ticket photo for OCR.

        Args:
            image_data: Raw image bytes (any format Pillow can read)

        Returns:
            PNG bytes of the binarized image

        Raises:
            ValueError: If the bytes are not a readable image
        """
        try:
            image = Image.open(io.BytesIO(image_data))
            image.load()
        except (OSError, Image.DecompressionBombError) as e:
            raise ValueError(f"Unreadable image: {e}") from e

        logger.debug(f"Preprocessing image size: {image.size}, mode: {image.mode}")
        binary = self.binarize(self.upscale(image))
        return self._pil_to_bytes(binary)

    def upscale(self, image: Image.Image) -> Image.Image:
        width = max(1, round(image.width * self.scale))
        height = max(1, round(image.height * self.scale))
        return image.resize((width, height), Image.Resampling.LANCZOS)

    def binarize(self, image: Image.Image) -> Image.Image:
        """ITU-R 601 luma, contrast stretch, then a hard threshold."""
        rgb = np.asarray(image.convert("RGB"), dtype=np.float32)
        gray = rgb[..., 0] * 0.299 + rgb[..., 1] * 0.587 + rgb[..., 2] * 0.114
        stretched = np.clip((gray - 128.0) * self.contrast + 128.0, 0, 255)
        binary = np.where(stretched > self.threshold, 255, 0).astype(np.uint8)
        return Image.fromarray(binary)

    def _pil_to_bytes(self, image: Image.Image) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()


def create_image_preprocessor(scale: Optional[float] = None) -> ImagePreprocessor:
    """Factory function to create preprocessor instance."""
    if scale is None:
        return ImagePreprocessor()
    return ImagePreprocessor(scale=scale)
