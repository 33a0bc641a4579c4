"""
OCR Provider Interface.

Every OCR backend turns one page image into plaintext. Line order in the
returned text is the only layout information the extraction core uses.
"""

from abc import ABC, abstractmethod

from PIL import Image


class OCRProvider(ABC):
    """Base class for OCR providers."""

    name: str = "base"

    @abstractmethod
    def extract_text(self, image: Image.Image) -> str:
        """
        Recognize the text of one image.

        Args:
            image: Page image.

        Returns:
            Plaintext with one line per printed/handwritten line; may be
            empty.

        Raises:
            OCRProcessingError: If the provider fails or is unreachable.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
