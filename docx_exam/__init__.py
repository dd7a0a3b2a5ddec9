"""Core modules for importing Word (.docx) exams."""

from .models import ExamDocument, ImageAsset, Paragraph, Question, Section, ValidationReport
from .service import ExamImportService

__all__ = [
    "ExamDocument",
    "ImageAsset",
    "Paragraph",
    "Question",
    "Section",
    "ValidationReport",
    "ExamImportService",
]
