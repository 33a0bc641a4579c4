"""
Custom Exceptions Module.

This module defines the exceptions raised by the extraction engine and
its collaborators. The extraction core itself never raises for noisy
input: a value that fails a structural check is dropped, not reported.
Errors surface only at the edges (configuration, input, OCR provider,
persistence).

Exception Hierarchy:
    OrderExtractionError (base)
    ├── ConfigurationError
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   └── InputFileNotFoundError
    ├── OCRError
    │   ├── OCRProviderNotAvailableError
    │   ├── OCRProcessingError
    │   └── EmptyOCRTextError
    └── OutputError
        ├── DatabaseError
        └── ExcelExportError
"""


class OrderExtractionError(Exception):
    """
    Base exception for all extraction engine errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(OrderExtractionError):
    """Raised when the configuration file is missing or malformed."""
    pass


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(OrderExtractionError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported file type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".pdf", [".txt", ".jpg"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class InputFileNotFoundError(InputError):
    """Raised when the input file cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


# =============================================================================
# OCR ERRORS
# =============================================================================

class OCRError(OrderExtractionError):
    """Base exception for OCR provider errors."""
    pass


class OCRProviderNotAvailableError(OCRError):
    """Raised when the configured OCR provider cannot be used."""

    def __init__(self, provider_name: str, reason: str = None):
        message = f"OCR provider not available: {provider_name}"
        details = {"provider": provider_name, "reason": reason}
        super().__init__(message, details)


class OCRProcessingError(OCRError):
    """Raised when the OCR provider fails or is unreachable."""

    def __init__(self, source: str, reason: str = None):
        message = f"OCR processing failed for: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


class EmptyOCRTextError(OCRError):
    """Raised when the OCR provider returns no text; nothing is extracted."""

    def __init__(self, source: str, provider_name: str = None):
        message = f"OCR returned no text for: {source}"
        details = {"source": source, "provider": provider_name}
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(OrderExtractionError):
    """Base exception for output handling errors."""
    pass


class DatabaseError(OutputError):
    """Raised when database operations fail."""

    def __init__(self, operation: str, reason: str = None):
        message = f"Database operation failed: {operation}"
        details = {"operation": operation, "reason": reason}
        super().__init__(message, details)


class ExcelExportError(OutputError):
    """Raised when the review workbook cannot be written."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to export Excel file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'OrderExtractionError',
    'ConfigurationError',
    'InputError',
    'UnsupportedFileTypeError',
    'InputFileNotFoundError',
    'OCRError',
    'OCRProviderNotAvailableError',
    'OCRProcessingError',
    'EmptyOCRTextError',
    'OutputError',
    'DatabaseError',
    'ExcelExportError',
]
