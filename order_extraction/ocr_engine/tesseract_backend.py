"""
Tesseract OCR Provider.

This module provides OCR functionality using Tesseract (pytesseract).
The default page segmentation mode (4, a single column of variable-size
text) keeps the form's lines in reading order.

Requirements:
    - Tesseract OCR installed on the system, with the "por" language data
    - pytesseract Python package
"""

import time

import pytesseract
from PIL import Image

from order_extraction.utils.logger import get_logger
from order_extraction.utils.exceptions import OCRProviderNotAvailableError, OCRProcessingError
from .base import OCRProvider

# Initialize module logger
logger = get_logger(__name__)


class TesseractProvider(OCRProvider):
    """
    Tesseract OCR provider.

    Attributes:
        language: Tesseract language code (e.g., "por")
        psm: Page Segmentation Mode (1-13)
        oem: OCR Engine Mode (0-3)
        extra_config: Additional Tesseract configuration

    Example:
        >>> provider = TesseractProvider(language="por")
        >>> text = provider.extract_text(image)
    """

    name = "tesseract"

    def __init__(
        self,
        language: str = "por",
        psm: int = 4,
        oem: int = 3,
        extra_config: str = "",
        check_installation: bool = True
    ) -> None:
        self.language = language
        self.psm = psm
        self.oem = oem
        self.extra_config = extra_config

        if check_installation:
            self._check_dependencies()

        logger.debug(
            f"TesseractProvider initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    @classmethod
    def from_config(cls, config) -> 'TesseractProvider':
        return cls(
            language=config.get("ocr.tesseract.lang", "por"),
            psm=config.get("ocr.tesseract.psm", 4),
            oem=config.get("ocr.tesseract.oem", 3),
            extra_config=config.get("ocr.tesseract.config", "") or ""
        )

    def _check_dependencies(self) -> None:
        """
        Check that the Tesseract binary is reachable.

        Raises:
            OCRProviderNotAvailableError: If Tesseract is not installed.
        """
        try:
            version = pytesseract.get_tesseract_version()
            logger.info(f"Tesseract version: {version}")
        except pytesseract.TesseractNotFoundError as e:
            raise OCRProviderNotAvailableError(
                self.name, f"Tesseract OCR not installed or not in PATH: {e}"
            )

    def _build_config(self) -> str:
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]

        if self.extra_config:
            config_parts.append(self.extra_config)

        return ' '.join(config_parts)

    def extract_text(self, image: Image.Image) -> str:
        start_time = time.time()

        if image.mode != 'RGB':
            image = image.convert('RGB')

        config = self._build_config()
        logger.debug(f"Running Tesseract OCR (config: {config})")

        try:
            text = pytesseract.image_to_string(
                image,
                lang=self.language,
                config=config
            )
        except (pytesseract.TesseractError, RuntimeError) as e:
            logger.error(f"OCR processing failed: {e}")
            raise OCRProcessingError("image", str(e))

        logger.info(
            f"Tesseract OCR completed: {len(text)} chars "
            f"({time.time() - start_time:.2f}s)"
        )
        return text
