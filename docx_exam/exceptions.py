class ProcessingError(Exception):
    """Base class for processing failures."""


class UnsupportedFileError(ProcessingError):
    """Raised when a file is not a Word (.docx) package."""


class EncryptedDocumentError(ProcessingError):
    """Raised when the Word package is password protected."""


class ParseError(ProcessingError):
    """Raised when parsing fails."""


class DocumentStructureError(ParseError):
    """Raised when the package has no readable document body."""
