from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from .config_manager import ConfigManager
from .error_messages import build_parse_error_message
from .images import DEFAULT_MIME_TYPE, ImageExtractor
from .models import ExamDocument, ValidationReport
from .package_reader import DocxPackage, PackageReader
from .paragraphs import ParagraphReconstructor
from .parser import ExamParser
from .validator import validate_exam_document


logger = logging.getLogger(__name__)


class ExamImportService:
    def __init__(self, config_manager: Optional[ConfigManager] = None) -> None:
        self.config_manager = config_manager or ConfigManager()
        self.last_report: Optional[ValidationReport] = None
        self._refresh_dependencies()

    def _refresh_dependencies(self) -> None:
        config = self.config_manager.all()
        self.package_reader = PackageReader()
        self.image_extractor = ImageExtractor(
            self.config_manager.get("images.default_mime_type", DEFAULT_MIME_TYPE)
        )
        self.parser = ExamParser(config)

    def reload_config(self) -> None:
        self.config_manager.reload()
        self._refresh_dependencies()

    def parse_file(self, file_path: str) -> ExamDocument:
        package = self.package_reader.open_file(file_path)
        return self._parse_package(package, self._infer_title(file_path))

    def parse_bytes(self, data: bytes, filename: str = "") -> ExamDocument:
        package = self.package_reader.open_bytes(data)
        return self._parse_package(package, self._infer_title(filename))

    def _parse_package(self, package: DocxPackage, title: str) -> ExamDocument:
        document_xml = package.document_xml()
        images, rel_to_asset = self.image_extractor.extract(package)
        logger.info("Extracted images: %d", len(images))

        paragraphs = ParagraphReconstructor(rel_to_asset).reconstruct(document_xml)
        document = self.parser.parse_paragraphs(paragraphs, title=title, images=images)
        self.last_report = validate_exam_document(document)
        logger.info(
            "Parsed %d questions in %d sections from %r",
            document.total_count,
            len(document.sections),
            title,
        )
        return document

    def _infer_title(self, file_path: str) -> str:
        name = Path(file_path).name if file_path else ""
        title = re.sub(r"\.docx$", "", name, flags=re.IGNORECASE).strip()
        return title or self.config_manager.get("exam.title_fallback", "")

    @staticmethod
    def describe_error(exc: Exception) -> str:
        return build_parse_error_message(str(exc))
