"""Flat key/value rows in the column layout of the question-bank sheet."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from .models import Question


QUESTION_TYPE_LABELS = {
    "multiple_choice": "Trắc nghiệm",
    "true_false": "Đúng/Sai",
    "short_answer": "Trả lời ngắn",
}

TRUE_MARK = "Đ"
FALSE_MARK = "S"
STATEMENT_LETTERS = "abcd"


def true_false_answer_key(answer: Optional[str]) -> str:
    """``"a,c"`` -> ``"Đ-S-Đ-S"``."""
    if not answer:
        return ""
    true_letters = {letter.strip().lower() for letter in answer.split(",")}
    return "-".join(
        TRUE_MARK if letter in true_letters else FALSE_MARK for letter in STATEMENT_LETTERS
    )


def to_sheet_row(
    question: Question,
    exam_id: str,
    grade: int,
    topic: str,
    uploaded_images: Optional[Mapping[str, str]] = None,
    level: str = "Thông hiểu",
    quiz_level: int = 1,
) -> dict[str, Any]:
    uploaded_images = uploaded_images or {}
    image_id = ""
    if question.images:
        image_id = uploaded_images.get(question.images[0], "")

    if question.type == "true_false":
        answer_key = true_false_answer_key(question.correct_answer)
    else:
        answer_key = question.correct_answer or ""

    options = {option.letter.upper(): option.text for option in question.options}
    return {
        "exam_id": exam_id,
        "level": level,
        "question_type": QUESTION_TYPE_LABELS.get(question.type, QUESTION_TYPE_LABELS["multiple_choice"]),
        "question_text": question.text,
        "image_id": image_id,
        "option_A": options.get("A", ""),
        "option_B": options.get("B", ""),
        "option_C": options.get("C", ""),
        "option_D": options.get("D", ""),
        "answer_key": answer_key,
        "solution": question.solution,
        "topic": topic,
        "grade": grade,
        "quiz_level": quiz_level,
    }


def to_sheet_rows(
    questions: Sequence[Question],
    grade: int,
    topic: str,
    batch_id: str,
    uploaded_images: Optional[Mapping[str, str]] = None,
) -> list[dict[str, Any]]:
    return [
        to_sheet_row(
            question,
            exam_id=f"Q{index:03d}_{batch_id}",
            grade=grade,
            topic=topic,
            uploaded_images=uploaded_images,
        )
        for index, question in enumerate(questions, start=1)
    ]
