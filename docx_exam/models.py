from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Optional


WEB_IMAGE_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp", "image/svg+xml")


@dataclass(frozen=True)
class ImageAsset:
    id: str
    filename: str
    payload: bytes
    mime_type: str
    relationship_id: Optional[str] = None

    @property
    def base64(self) -> str:
        return base64.b64encode(self.payload).decode("ascii")

    @property
    def is_web_compatible(self) -> bool:
        return self.mime_type in WEB_IMAGE_TYPES

    def data_url(self) -> str:
        if not self.payload:
            return ""
        return f"data:{self.mime_type};base64,{self.base64}"


@dataclass(frozen=True)
class Paragraph:
    text: str
    has_underline: bool = False
    underlined_segments: tuple[str, ...] = ()


@dataclass(frozen=True)
class QuestionOption:
    letter: str
    text: str


@dataclass
class RawQuestion:
    number: int
    part: int
    stem_text: str
    options: list[QuestionOption] = field(default_factory=list)
    correct_answer: Optional[str] = None
    solution_text: str = ""


@dataclass(frozen=True)
class Question:
    number: int
    text: str
    type: str
    options: tuple[QuestionOption, ...] = ()
    correct_answer: Optional[str] = None
    solution: str = ""
    section_part: int = 0
    part_label: str = ""
    images: tuple[str, ...] = ()

    @property
    def source_number(self) -> int:
        return self.number - self.section_part * 100


@dataclass
class Section:
    name: str
    description: str
    section_type: str
    questions: list[Question] = field(default_factory=list)


@dataclass
class ExamDocument:
    title: str
    time_limit: int = 90
    sections: list[Section] = field(default_factory=list)
    questions: list[Question] = field(default_factory=list)
    answers: dict[int, str] = field(default_factory=dict)
    images: list[ImageAsset] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.questions)


@dataclass
class ValidationReport:
    valid: bool
    errors: list[str] = field(default_factory=list)
    part_counts: dict[int, int] = field(default_factory=dict)
    with_answer: int = 0
    without_answer: int = 0
