from __future__ import annotations

import logging

from .models import ExamDocument, ValidationReport


logger = logging.getLogger(__name__)


def validate_exam_document(document: ExamDocument) -> ValidationReport:
    """Collect non-blocking findings; the document is never modified."""
    errors: list[str] = []
    if not document.questions:
        errors.append("Không tìm thấy câu hỏi nào trong file")

    part_counts = {1: 0, 2: 0, 3: 0}
    with_answer = 0
    without_answer = 0
    for question in document.questions:
        if not question.text or not question.text.strip():
            errors.append(f"Câu {question.number}: Thiếu nội dung câu hỏi")

        part = question.number // 100
        if part in part_counts:
            part_counts[part] += 1

        if question.correct_answer:
            with_answer += 1
        else:
            without_answer += 1

    logger.info(
        "Question count: PHẦN 1=%d, PHẦN 2=%d, PHẦN 3=%d",
        part_counts[1],
        part_counts[2],
        part_counts[3],
    )
    logger.info("Answers: with=%d, without=%d", with_answer, without_answer)
    for error in errors:
        logger.warning("Validation: %s", error)

    return ValidationReport(
        valid=not errors,
        errors=errors,
        part_counts=part_counts,
        with_answer=with_answer,
        without_answer=without_answer,
    )
