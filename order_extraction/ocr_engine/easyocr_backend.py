"""EasyOCR provider (optional ``easyocr`` extra)."""

from typing import List, Optional

from PIL import Image

from order_extraction.utils.logger import get_logger
from order_extraction.utils.exceptions import OCRProviderNotAvailableError, OCRProcessingError
from .base import OCRProvider

# Initialize module logger
logger = get_logger(__name__)


class EasyOCRProvider(OCRProvider):
    """
    OCR through EasyOCR.

    Results come back as word or phrase boxes; boxes of one printed row
    are joined left to right so a label and its value share a line.
    """

    name = "easyocr"

    def __init__(self, languages: Optional[List[str]] = None, gpu: bool = False, reader=None) -> None:
        self.languages = list(languages or ["pt"])
        self.gpu = gpu
        self.reader = reader or self._load_reader()

    @classmethod
    def from_config(cls, config) -> 'EasyOCRProvider':
        return cls(
            languages=config.get("ocr.easyocr.languages", ["pt"]),
            gpu=config.get("ocr.easyocr.gpu", False)
        )

    def _load_reader(self):
        try:
            import easyocr
        except ImportError:
            raise OCRProviderNotAvailableError(
                self.name, "easyocr is not installed (pip install order-extraction[easyocr])"
            )
        logger.info(f"Loading EasyOCR reader for {self.languages}")
        return easyocr.Reader(self.languages, gpu=self.gpu)

    def extract_text(self, image: Image.Image) -> str:
        import numpy as np

        img_array = np.array(image.convert('RGB'))

        try:
            results = self.reader.readtext(img_array)
        except Exception as e:
            raise OCRProcessingError("image", str(e)) from e

        return '\n'.join(
            ' '.join(box.text for box in row)
            for row in group_rows(results)
        )


class _Box:
    __slots__ = ('text', 'left', 'top', 'bottom')

    def __init__(self, corners, text: str) -> None:
        xs = [p[0] for p in corners]
        ys = [p[1] for p in corners]
        self.text = text.strip()
        self.left = min(xs)
        self.top = min(ys)
        self.bottom = max(ys)

    @property
    def center(self) -> float:
        return (self.top + self.bottom) / 2

    @property
    def height(self) -> float:
        return self.bottom - self.top


def group_rows(results) -> List[List[_Box]]:
    """
    Group EasyOCR ``(corners, text, confidence)`` results into printed rows.

    A box joins the current row when its vertical centre lies within half
    a box height of the row's centre. Rows come out top to bottom, boxes
    inside a row left to right.
    """
    boxes = sorted(
        (_Box(corners, text) for corners, text, _ in results if text and text.strip()),
        key=lambda b: b.center
    )

    rows: List[List[_Box]] = []
    for box in boxes:
        if rows:
            row = rows[-1]
            row_center = sum(b.center for b in row) / len(row)
            tolerance = max(box.height, max(b.height for b in row)) / 2
            if abs(box.center - row_center) <= tolerance:
                row.append(box)
                continue
        rows.append([box])

    return [sorted(row, key=lambda b: b.left) for row in rows]
