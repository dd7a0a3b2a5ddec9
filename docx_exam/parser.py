from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from .assembler import assemble_exam
from .detector import DEFAULT_SECTION_PATTERNS, SectionRanges, detect_sections
from .models import ExamDocument, ImageAsset, Paragraph, RawQuestion
from .segmenters import (
    GrammarPatterns,
    MultipleChoiceSegmenter,
    PartSegmenter,
    ShortAnswerSegmenter,
    TrueFalseSegmenter,
)


logger = logging.getLogger(__name__)

DEFAULT_TIME_LIMIT = 90


class ExamParser:
    def __init__(self, config: Optional[dict[str, Any]] = None) -> None:
        config = config or {}
        parsing = config.get("parsing", {})
        exam = config.get("exam", {})
        self.time_limit: int = int(exam.get("time_limit", DEFAULT_TIME_LIMIT))
        self.section_patterns: dict[int, list[str]] = {
            part: parsing.get(f"part{part}_patterns", DEFAULT_SECTION_PATTERNS[part])
            for part in (1, 2, 3)
        }
        patterns = GrammarPatterns.from_config(config)
        self.segmenters: list[PartSegmenter] = [
            MultipleChoiceSegmenter(patterns),
            TrueFalseSegmenter(patterns),
            ShortAnswerSegmenter(patterns),
        ]

    def detect_sections(self, paragraphs: Sequence[Paragraph]) -> SectionRanges:
        return detect_sections([paragraph.text for paragraph in paragraphs], self.section_patterns)

    def segment(self, paragraphs: Sequence[Paragraph]) -> dict[int, list[RawQuestion]]:
        ranges = self.detect_sections(paragraphs)
        parts: dict[int, list[RawQuestion]] = {}
        for segmenter in self.segmenters:
            parts[segmenter.part] = segmenter.segment(paragraphs, ranges.range_for(segmenter.part))
        logger.info(
            "Parsed: PHẦN 1=%d, PHẦN 2=%d, PHẦN 3=%d",
            len(parts[1]),
            len(parts[2]),
            len(parts[3]),
        )
        return parts

    def parse_paragraphs(
        self,
        paragraphs: Sequence[Paragraph],
        title: str = "",
        images: Sequence[ImageAsset] = (),
    ) -> ExamDocument:
        return assemble_exam(
            self.segment(paragraphs),
            title=title,
            time_limit=self.time_limit,
            images=images,
        )
