from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from .detector import (
    DEFAULT_CHOICE_PATTERNS,
    DEFAULT_FIGURE_PATTERNS,
    DEFAULT_QUESTION_PATTERNS,
    DEFAULT_SHORT_ANSWER_PATTERNS,
    DEFAULT_SOLUTION_PATTERNS,
    MULTIPLE_CHOICE_HEADING_PATTERNS,
    PART_HEADING_PATTERNS,
    _compile_patterns,
    extract_question_header,
    is_line_matching,
    search_first_group,
)
from .models import Paragraph, QuestionOption, RawQuestion


logger = logging.getLogger(__name__)


class LineKind(Enum):
    SECTION_HEADING = "section_heading"
    HEADER = "header"
    SOLUTION = "solution"
    CHOICE = "choice"
    ANSWER = "answer"
    FIGURE = "figure"
    OPTION = "option"
    TEXT = "text"


@dataclass(frozen=True)
class LineMatch:
    kind: LineKind
    number: Optional[int] = None
    letter: str = ""
    payload: str = ""
    segments: tuple[tuple[str, str], ...] = ()


Matcher = Callable[[str], Optional[LineMatch]]


@dataclass
class GrammarPatterns:
    question: list[re.Pattern[str]]
    solution: list[re.Pattern[str]]
    figure: list[re.Pattern[str]]
    choice: list[re.Pattern[str]]
    short_answer: list[re.Pattern[str]]

    @classmethod
    def from_config(cls, config: Optional[dict[str, Any]] = None) -> "GrammarPatterns":
        parsing = (config or {}).get("parsing", {})
        return cls(
            question=_compile_patterns(parsing.get("question_patterns", DEFAULT_QUESTION_PATTERNS)),
            solution=_compile_patterns(parsing.get("solution_patterns", DEFAULT_SOLUTION_PATTERNS)),
            figure=_compile_patterns(parsing.get("figure_patterns", DEFAULT_FIGURE_PATTERNS)),
            choice=_compile_patterns(parsing.get("choice_patterns", DEFAULT_CHOICE_PATTERNS)),
            short_answer=_compile_patterns(
                parsing.get("short_answer_patterns", DEFAULT_SHORT_ANSWER_PATTERNS)
            ),
        )


@dataclass
class _QuestionDraft:
    number: int
    part: int
    stem_lines: list[str] = field(default_factory=list)
    option_letters: list[str] = field(default_factory=list)
    option_texts: list[str] = field(default_factory=list)
    solution_lines: list[str] = field(default_factory=list)
    explicit_answer: Optional[str] = None
    underline_evidence: list[str] = field(default_factory=list)
    in_solution: bool = False

    @property
    def has_options(self) -> bool:
        return bool(self.option_letters)

    @property
    def current_letter(self) -> str:
        return self.option_letters[-1]

    def add_option(self, letter: str, text: str) -> None:
        self.option_letters.append(letter)
        self.option_texts.append(text.strip())

    def extend_option(self, text: str) -> None:
        self.option_texts[-1] = f"{self.option_texts[-1]} {text}".strip()

    def finalize(self, underline_answer: Optional[str]) -> Optional[RawQuestion]:
        stem = " ".join(self.stem_lines).strip()
        if not stem:
            logger.debug("Dropping part %d question %d without stem", self.part, self.number)
            return None
        return RawQuestion(
            number=self.number,
            part=self.part,
            stem_text=stem,
            options=[
                QuestionOption(letter=letter, text=text)
                for letter, text in zip(self.option_letters, self.option_texts)
            ],
            correct_answer=self.explicit_answer or underline_answer,
            solution_text=" ".join(self.solution_lines).strip(),
        )


class PartSegmenter:
    """Forward scan over one section: header -> stem -> options -> solution."""

    part = 0
    heading_patterns: Sequence[str] = PART_HEADING_PATTERNS

    def __init__(self, patterns: Optional[GrammarPatterns] = None) -> None:
        self.patterns = patterns or GrammarPatterns.from_config()
        self._heading_patterns = _compile_patterns(self.heading_patterns)

    def matchers(self) -> list[Matcher]:
        return [
            self._match_section_heading,
            self._match_header,
            self._match_solution,
            self._match_figure,
        ]

    def classify(self, text: str) -> LineMatch:
        for matcher in self.matchers():
            result = matcher(text)
            if result is not None:
                return result
        return LineMatch(LineKind.TEXT, payload=text)

    def segment(self, paragraphs: Sequence[Paragraph], index_range: range) -> list[RawQuestion]:
        questions: list[RawQuestion] = []
        draft: Optional[_QuestionDraft] = None

        for index in index_range:
            if index < 0 or index >= len(paragraphs):
                continue
            paragraph = paragraphs[index]
            if not paragraph.text:
                continue
            match = self.classify(paragraph.text)
            if match.kind is LineKind.HEADER:
                self._flush(draft, questions)
                draft = _QuestionDraft(number=match.number or 0, part=self.part)
                if match.payload:
                    draft.stem_lines.append(match.payload)
                self._on_header(draft, paragraph)
                continue
            if draft is None:
                continue
            self._step(draft, paragraph, match)

        self._flush(draft, questions)
        questions.sort(key=lambda question: question.number)
        logger.info("Part %d: %d questions", self.part, len(questions))
        return questions

    def _flush(self, draft: Optional[_QuestionDraft], questions: list[RawQuestion]) -> None:
        if draft is None:
            return
        question = draft.finalize(self._underline_answer(draft))
        if question is not None:
            questions.append(question)

    def _step(self, draft: _QuestionDraft, paragraph: Paragraph, match: LineMatch) -> None:
        kind = match.kind
        if kind in (LineKind.SECTION_HEADING, LineKind.FIGURE):
            return
        if kind is LineKind.SOLUTION:
            draft.in_solution = True
            draft.solution_lines = []
            return
        if kind in (LineKind.CHOICE, LineKind.ANSWER):
            draft.explicit_answer = match.letter or match.payload
            return
        if kind is LineKind.OPTION and not draft.in_solution:
            for letter, text in match.segments:
                draft.add_option(letter, text)
            self._on_option(draft, paragraph, match)
            return

        text = paragraph.text
        if draft.in_solution:
            draft.solution_lines.append(text)
        elif draft.has_options:
            draft.extend_option(text)
            self._on_continuation(draft, paragraph)
        else:
            draft.stem_lines.append(text)
            self._on_stem(draft, paragraph)

    # Underline evidence hooks, overridden per grammar.
    def _on_header(self, draft: _QuestionDraft, paragraph: Paragraph) -> None:
        return None

    def _on_stem(self, draft: _QuestionDraft, paragraph: Paragraph) -> None:
        return None

    def _on_option(self, draft: _QuestionDraft, paragraph: Paragraph, match: LineMatch) -> None:
        return None

    def _on_continuation(self, draft: _QuestionDraft, paragraph: Paragraph) -> None:
        return None

    def _underline_answer(self, draft: _QuestionDraft) -> Optional[str]:
        return None

    # Matchers
    def _match_section_heading(self, text: str) -> Optional[LineMatch]:
        if is_line_matching(text, self._heading_patterns):
            return LineMatch(LineKind.SECTION_HEADING)
        return None

    def _match_header(self, text: str) -> Optional[LineMatch]:
        header = extract_question_header(text, self.patterns.question)
        if header is None:
            return None
        number, rest = header
        return LineMatch(LineKind.HEADER, number=number, payload=rest)

    def _match_solution(self, text: str) -> Optional[LineMatch]:
        if is_line_matching(text, self.patterns.solution):
            return LineMatch(LineKind.SOLUTION)
        return None

    def _match_figure(self, text: str) -> Optional[LineMatch]:
        if is_line_matching(text, self.patterns.figure):
            return LineMatch(LineKind.FIGURE)
        return None


class MultipleChoiceSegmenter(PartSegmenter):
    part = 1
    heading_patterns = MULTIPLE_CHOICE_HEADING_PATTERNS

    _OPTION_RE = re.compile(r"^\s*([A-D])\s*[.)]\s*(.*)", re.S)
    _OPTION_MARKER_RE = re.compile(r"(?:^|(?<=\s))([A-D])\s*[.)]\s*")
    _UNDERLINED_LETTER_RE = re.compile(r"^([A-D])(?:\s*[.)]|$)")
    _BARE_LETTER_RE = re.compile(r"^[A-Da-d]$")

    def matchers(self) -> list[Matcher]:
        return [
            self._match_section_heading,
            self._match_header,
            self._match_solution,
            self._match_choice,
            self._match_figure,
            self._match_option,
        ]

    def _match_choice(self, text: str) -> Optional[LineMatch]:
        letter = search_first_group(text, self.patterns.choice)
        if letter:
            return LineMatch(LineKind.CHOICE, letter=letter.upper())
        return None

    def _match_option(self, text: str) -> Optional[LineMatch]:
        match = self._OPTION_RE.match(text)
        if not match:
            return None
        segments = self._split_compound_options(text)
        if len(segments) < 2:
            segments = [(match.group(1), match.group(2).strip())]
        return LineMatch(
            LineKind.OPTION,
            letter=segments[0][0],
            payload=segments[0][1],
            segments=tuple(segments),
        )

    def _split_compound_options(self, text: str) -> list[tuple[str, str]]:
        """Split ``A. 3   B. 4   C. 5   D. 6`` written on a single line."""
        markers = list(self._OPTION_MARKER_RE.finditer(text))
        if len(markers) <= 1:
            return []
        letters = [marker.group(1) for marker in markers]
        expected = [chr(ord(letters[0]) + offset) for offset in range(len(letters))]
        if letters != expected:
            return []

        segments: list[tuple[str, str]] = []
        for index, marker in enumerate(markers):
            end = markers[index + 1].start() if index + 1 < len(markers) else len(text)
            payload = text[marker.end():end].strip()
            if not payload:
                return []
            segments.append((marker.group(1), payload))
        return segments

    def _on_header(self, draft: _QuestionDraft, paragraph: Paragraph) -> None:
        if paragraph.has_underline:
            draft.underline_evidence.extend(paragraph.underlined_segments)

    def _on_stem(self, draft: _QuestionDraft, paragraph: Paragraph) -> None:
        if paragraph.has_underline:
            draft.underline_evidence.extend(paragraph.underlined_segments)

    def _on_option(self, draft: _QuestionDraft, paragraph: Paragraph, match: LineMatch) -> None:
        if not paragraph.has_underline:
            return
        if len(match.segments) == 1:
            draft.underline_evidence.append(match.letter)
            return
        for segment in paragraph.underlined_segments:
            letter = self._UNDERLINED_LETTER_RE.match(segment)
            if letter:
                draft.underline_evidence.append(letter.group(1))

    def _on_continuation(self, draft: _QuestionDraft, paragraph: Paragraph) -> None:
        if paragraph.has_underline:
            draft.underline_evidence.append(draft.current_letter)

    def _underline_answer(self, draft: _QuestionDraft) -> Optional[str]:
        for evidence in draft.underline_evidence:
            if self._BARE_LETTER_RE.match(evidence):
                return evidence.upper()
        return None


class TrueFalseSegmenter(PartSegmenter):
    part = 2

    _STATEMENT_RE = re.compile(r"^\s*([a-d])\s*[).]\s*(.*)", re.S)

    def matchers(self) -> list[Matcher]:
        return [
            self._match_section_heading,
            self._match_header,
            self._match_solution,
            self._match_figure,
            self._match_statement,
        ]

    def _match_statement(self, text: str) -> Optional[LineMatch]:
        match = self._STATEMENT_RE.match(text)
        if not match:
            return None
        letter, payload = match.group(1), match.group(2).strip()
        return LineMatch(LineKind.OPTION, letter=letter, payload=payload, segments=((letter, payload),))

    def _on_option(self, draft: _QuestionDraft, paragraph: Paragraph, match: LineMatch) -> None:
        if paragraph.has_underline:
            draft.underline_evidence.append(match.letter)

    def _on_continuation(self, draft: _QuestionDraft, paragraph: Paragraph) -> None:
        if paragraph.has_underline:
            draft.underline_evidence.append(draft.current_letter)

    def _underline_answer(self, draft: _QuestionDraft) -> Optional[str]:
        true_statements = sorted(set(draft.underline_evidence))
        return ",".join(true_statements) or None


class ShortAnswerSegmenter(PartSegmenter):
    part = 3

    def matchers(self) -> list[Matcher]:
        return [
            self._match_section_heading,
            self._match_header,
            self._match_solution,
            self._match_answer,
            self._match_figure,
        ]

    def _match_answer(self, text: str) -> Optional[LineMatch]:
        value = search_first_group(text, self.patterns.short_answer)
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        return LineMatch(LineKind.ANSWER, payload=value)
