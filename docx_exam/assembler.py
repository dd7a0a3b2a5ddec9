from __future__ import annotations

import re
from typing import Sequence

from .models import ExamDocument, ImageAsset, Question, QuestionOption, RawQuestion, Section
from .normalizer import escape_html_preserve_math


SECTION_METADATA = {
    1: {
        "name": "PHẦN 1. Trắc nghiệm nhiều lựa chọn",
        "description": "Thí sinh chọn một phương án đúng A, B, C hoặc D",
        "section_type": "multiple_choice",
    },
    2: {
        "name": "PHẦN 2. Trắc nghiệm đúng sai",
        "description": "Thí sinh chọn Đúng hoặc Sai cho mỗi ý a), b), c), d)",
        "section_type": "true_false",
    },
    3: {
        "name": "PHẦN 3. Trắc nghiệm trả lời ngắn",
        "description": "Thí sinh điền đáp án số vào ô trống",
        "section_type": "short_answer",
    },
}

# Part 2 answers are a per-statement vector, not a scalar answer.
ANSWER_MAP_PARTS = (1, 3)

_ASSET_MARKER_RE = re.compile(r"\[IMAGE:(img_\d+)\]")


def _referenced_assets(*texts: str) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for text in texts:
        for match in _ASSET_MARKER_RE.finditer(text):
            seen.setdefault(match.group(1), None)
    return tuple(seen)


def build_question(raw: RawQuestion) -> Question:
    metadata = SECTION_METADATA[raw.part]
    options = tuple(
        QuestionOption(letter=option.letter, text=escape_html_preserve_math(option.text))
        for option in raw.options
    )
    return Question(
        number=raw.part * 100 + raw.number,
        text=escape_html_preserve_math(raw.stem_text),
        type=metadata["section_type"],
        options=options,
        correct_answer=raw.correct_answer,
        solution=escape_html_preserve_math(raw.solution_text),
        section_part=raw.part,
        part_label=f"PHẦN {raw.part}",
        images=_referenced_assets(
            raw.stem_text,
            *(option.text for option in raw.options),
            raw.solution_text,
        ),
    )


def assemble_exam(
    parts: dict[int, Sequence[RawQuestion]],
    title: str = "",
    time_limit: int = 90,
    images: Sequence[ImageAsset] = (),
) -> ExamDocument:
    document = ExamDocument(title=title, time_limit=time_limit, images=list(images))
    for part in (1, 2, 3):
        raw_questions = parts.get(part) or []
        if not raw_questions:
            continue
        metadata = SECTION_METADATA[part]
        section = Section(
            name=metadata["name"],
            description=metadata["description"],
            section_type=metadata["section_type"],
        )
        for raw in raw_questions:
            question = build_question(raw)
            section.questions.append(question)
            document.questions.append(question)
            if part in ANSWER_MAP_PARTS and question.correct_answer:
                document.answers[question.number] = question.correct_answer
        document.sections.append(section)
    return document
