"""
Main Input Handler Module.

This module provides the InputHandler class, the entry point for loading
an order document as plaintext. Plain-text files (an OCR transcript
saved earlier) are read as-is; images are sent through the OCR engine.

Usage:
    from order_extraction.input_handler import InputHandler

    handler = InputHandler(ocr_engine=engine)
    loaded = handler.load("pedido.jpg")
    print(loaded.text)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from order_extraction.utils.logger import get_logger
from order_extraction.utils.helpers import get_file_extension, validate_file_exists
from order_extraction.utils.exceptions import (
    InputFileNotFoundError,
    InputError,
    UnsupportedFileTypeError,
)

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class InputResult:
    """
    A loaded document.

    Attributes:
        filepath: Original file path
        filename: Original filename
        file_type: 'text' or 'image'
        text: Document plaintext
    """
    filepath: str
    filename: str
    file_type: str
    text: str

    def __repr__(self) -> str:
        return (
            f"InputResult(filename='{self.filename}', "
            f"type='{self.file_type}', "
            f"chars={len(self.text)})"
        )


class InputHandler:
    """
    Loads order documents as plaintext.

    Attributes:
        ocr_engine: OCREngine used for image files; created lazily
        config: ConfigurationManager handed to a lazily created engine

    Example:
        >>> handler = InputHandler()
        >>> handler.detect_file_type("pedido.png")
        'image'
    """

    TEXT_EXTENSIONS = {'.txt'}
    IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp', '.webp'}

    def __init__(self, ocr_engine=None, config=None) -> None:
        self._ocr_engine = ocr_engine
        self.config = config

    @property
    def supported_extensions(self) -> set:
        return self.TEXT_EXTENSIONS | self.IMAGE_EXTENSIONS

    @property
    def ocr_engine(self):
        if self._ocr_engine is None:
            from order_extraction.ocr_engine import OCREngine
            self._ocr_engine = OCREngine(self.config)
        return self._ocr_engine

    def detect_file_type(self, filepath: Union[str, Path]) -> str:
        """
        Detect the type of input file.

        Returns:
            'text' or 'image'.

        Raises:
            UnsupportedFileTypeError: If file type is not supported.
        """
        extension = get_file_extension(filepath)

        if extension in self.TEXT_EXTENSIONS:
            return 'text'
        if extension in self.IMAGE_EXTENSIONS:
            return 'image'

        raise UnsupportedFileTypeError(extension or "(none)", sorted(self.supported_extensions))

    def load(self, filepath: Union[str, Path], ocr_engine=None) -> InputResult:
        """
        Load one document as plaintext.

        Args:
            filepath: Path to a .txt transcript or an image.
            ocr_engine: Engine for image files; defaults to the handler's.

        Returns:
            InputResult with the document text.

        Raises:
            InputFileNotFoundError: If the file does not exist.
            UnsupportedFileTypeError: If the extension is not supported.
            InputError: If a text file cannot be decoded.
            OCRError: If OCR of an image fails or yields no text.
        """
        path = Path(filepath)
        if not validate_file_exists(path):
            raise InputFileNotFoundError(str(path))

        file_type = self.detect_file_type(path)
        logger.info(f"Loading {file_type} file: {path.name}")

        if file_type == 'text':
            text = self._read_text(path)
        else:
            text = (ocr_engine or self.ocr_engine).extract_text(path)

        return InputResult(
            filepath=str(path),
            filename=path.name,
            file_type=file_type,
            text=text
        )

    def load_text(self, filepath: Union[str, Path], ocr_engine=None) -> str:
        """Shortcut returning only the document text."""
        return self.load(filepath, ocr_engine).text

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            return path.read_text(encoding='utf-8')
        except UnicodeDecodeError as e:
            raise InputError(
                f"Text file is not valid UTF-8: {path}",
                {"filepath": str(path), "reason": str(e)}
            )
