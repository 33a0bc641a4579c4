"""
Main OCR Engine Module.

This module provides the OCREngine class, the single entry point for
turning an order image into plaintext. The provider is chosen by the
``ocr.provider`` setting and built from its own config section.

Usage:
    from order_extraction.ocr_engine import OCREngine

    engine = OCREngine(config)
    text = engine.extract_text("pedido.jpg")
"""

from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from order_extraction.utils.logger import get_logger
from order_extraction.utils.exceptions import EmptyOCRTextError, OCRProcessingError
from .base import OCRProvider

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    Unified interface over the OCR providers.

    Supported Providers:
        - tesseract: Tesseract OCR (default)
        - google_vision: Google Cloud Vision REST API
        - easyocr: EasyOCR (optional extra)

    Attributes:
        provider: The active OCRProvider instance

    Example:
        >>> engine = OCREngine(config)
        >>> text = engine.extract_text("pedido.jpg")
    """

    SUPPORTED_PROVIDERS = ['tesseract', 'google_vision', 'easyocr']

    def __init__(self, config=None, provider: Optional[OCRProvider] = None) -> None:
        """
        Initialize the OCR engine.

        Args:
            config: ConfigurationManager; defaults to config/settings.yaml.
            provider: Ready provider instance, bypassing the config.
        """
        if provider is None:
            if config is None:
                from config import get_default_config
                config = get_default_config()
            provider = self.create_provider(config.get("ocr.provider", "tesseract"), config)

        self.provider = provider
        logger.info(f"OCR Engine initialized with provider: {self.provider.name}")

    @property
    def provider_name(self) -> str:
        return self.provider.name

    @classmethod
    def create_provider(cls, name: str, config) -> OCRProvider:
        """
        Build a provider by name.

        Unknown names fall back to tesseract with a warning.
        """
        if name == "google_vision":
            from .vision_backend import GoogleVisionProvider
            return GoogleVisionProvider.from_config(config)

        if name == "easyocr":
            from .easyocr_backend import EasyOCRProvider
            return EasyOCRProvider.from_config(config)

        if name != "tesseract":
            logger.warning(f"Unknown OCR provider '{name}', falling back to tesseract")

        from .tesseract_backend import TesseractProvider
        return TesseractProvider.from_config(config)

    def load_image(self, image: Union[Image.Image, str, Path]) -> Image.Image:
        """
        Open an image path, or pass a PIL image through.

        Raises:
            OCRProcessingError: If the file is not a readable image.
        """
        if isinstance(image, Image.Image):
            return image

        image_path = str(image)
        logger.debug(f"Loading image from: {image_path}")
        try:
            loaded = Image.open(image_path)
            loaded.load()
        except (OSError, UnidentifiedImageError) as e:
            raise OCRProcessingError(image_path, f"Failed to load image: {e}")
        return loaded

    def extract_text(self, image: Union[Image.Image, str, Path]) -> str:
        """
        Recognize the text of one image.

        Args:
            image: PIL Image or path to an image file.

        Returns:
            Non-empty OCR plaintext.

        Raises:
            OCRProcessingError: If loading or recognition fails.
            EmptyOCRTextError: If the provider returns no text.
        """
        source = image if isinstance(image, (str, Path)) else "image"
        page = self.load_image(image)

        logger.debug(f"Extracting text using {self.provider.name} provider")
        text = self.provider.extract_text(page)

        if not text or not text.strip():
            raise EmptyOCRTextError(str(source), self.provider.name)

        return text
