from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence


logger = logging.getLogger(__name__)


DEFAULT_QUESTION_PATTERNS = [
    r"(?s)^\s*(?i:C(?:âu|au)|Question)\s*(\d+)\s*[.:]\s*(.*)",
]

DEFAULT_SOLUTION_PATTERNS = [
    r"^\s*(?i:L(?:ời|oi)\s*gi(?:ải|ai))",
    r"^\s*(?i:Solution)\b",
]

DEFAULT_FIGURE_PATTERNS = [
    r"^\s*(?i:H(?:ình|inh))\s*\d+",
    r"^\s*(?i:Figure)\s*\d+",
]

DEFAULT_CHOICE_PATTERNS = [
    r"\b(?i:Ch(?:ọn|on)|Choose)\s*([A-Da-d])\b",
]

DEFAULT_SHORT_ANSWER_PATTERNS = [
    r"^[*\s]*(?i:[ĐD](?:áp|ap)\s*(?:án|an))\s*[:：]?\s*([^\s:：][^\n]*)",
    r"^[*\s]*(?i:Answer)\s*[:：]\s*([^\s:：][^\n]*)",
]

PART_HEADING_PATTERNS = [
    r"^\s*(?i:(?:PH(?:Ầ|A)N|PART)\s*(?:\d|[IV]+\b))",
]

MULTIPLE_CHOICE_HEADING_PATTERNS = [
    *PART_HEADING_PATTERNS,
    r"^\s*(?i:Tr(?:ắ|a)c\s*nghi(?:ệ|e)m)",
]

DEFAULT_SECTION_PATTERNS = {
    1: [
        r"(?i)PHẦN\s*1(?!\d)",
        r"(?i)PHAN\s*1(?!\d)",
        r"(?i)PHẦN\s+I[.\s]",
        r"(?i)(?<![IV])I\.\s*TRẮC\s*NGHIỆM",
        r"(?i)(?<![IV])I\.\s*TRAC\s*NGHIEM",
        r"(?i)\bPART\s*1(?!\d)",
        r"(?i)\bPART\s+I[.:\s]",
    ],
    2: [
        r"(?i)PHẦN\s*2(?!\d)",
        r"(?i)PHAN\s*2(?!\d)",
        r"(?i)PHẦN\s+II[.\s]",
        r"(?i)(?<![IV])II\.\s*ĐÚNG\s*SAI",
        r"(?i)(?<![IV])II\.\s*DUNG\s*SAI",
        r"(?i)\bPART\s*2(?!\d)",
        r"(?i)\bPART\s+II[.:\s]",
        r"(?i)ĐÚNG\s*SAI",
        r"(?i)\bDUNG\s*SAI",
    ],
    3: [
        r"(?i)PHẦN\s*3(?!\d)",
        r"(?i)PHAN\s*3(?!\d)",
        r"(?i)PHẦN\s+III[.\s]",
        r"(?i)III\.\s*TRẢ\s*LỜI",
        r"(?i)III\.\s*TRA\s*LOI",
        r"(?i)\bPART\s*3(?!\d)",
        r"(?i)\bPART\s+III[.:\s]",
        r"(?i)TRẢ\s*LỜI\s*NGẮN",
        r"(?i)\bTRA\s*LOI\s*NGAN",
    ],
}


def _compile_patterns(patterns: Sequence[str]) -> list[re.Pattern[str]]:
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            logger.warning("Skipping invalid pattern %r: %s", pattern, exc)
            continue
    return compiled


def extract_question_header(
    text: str,
    question_patterns: Optional[Sequence[re.Pattern[str]]] = None,
) -> Optional[tuple[int, str]]:
    """Return ``(source number, trailing stem text)`` for a question header line."""
    patterns = question_patterns or _compile_patterns(DEFAULT_QUESTION_PATTERNS)
    for pattern in patterns:
        match = pattern.match(text)
        if not match:
            continue
        groups = match.groups()
        if not groups or not groups[0] or not groups[0].isdigit():
            continue
        rest = groups[1] if len(groups) > 1 and groups[1] else ""
        return int(groups[0]), rest.strip()
    return None


def is_line_matching(text: str, patterns: Sequence[re.Pattern[str]]) -> bool:
    return any(pattern.match(text) for pattern in patterns)


def search_first_group(text: str, patterns: Sequence[re.Pattern[str]]) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


@dataclass(frozen=True)
class SectionRanges:
    part1_start: int
    part2_start: int
    part3_start: int
    total: int

    def range_for(self, part: int) -> range:
        if part == 1:
            return range(self.part1_start, min(self.part2_start, self.part3_start))
        if part == 2:
            return range(self.part2_start, self.part3_start)
        if part == 3:
            return range(self.part3_start, self.total)
        raise ValueError(f"unknown part: {part}")


def detect_sections(
    texts: Sequence[str],
    section_patterns: Optional[dict[int, Sequence[str]]] = None,
) -> SectionRanges:
    raw = section_patterns or DEFAULT_SECTION_PATTERNS
    compiled = {part: _compile_patterns(raw.get(part, [])) for part in (1, 2, 3)}

    def _matches(part: int, text: str) -> bool:
        return any(pattern.search(text) for pattern in compiled[part])

    part1 = part2 = part3 = -1
    for index, text in enumerate(texts):
        if part1 == -1 and _matches(1, text):
            part1 = index
        if part2 == -1 and index > part1 and _matches(2, text):
            part2 = index
        if part3 == -1 and index > max(part1, part2) and _matches(3, text):
            part3 = index

    total = len(texts)
    ranges = SectionRanges(
        part1_start=part1 if part1 != -1 else 0,
        part2_start=part2 if part2 != -1 else total,
        part3_start=part3 if part3 != -1 else total,
        total=total,
    )
    logger.debug("Section ranges: %s", ranges)
    return ranges
