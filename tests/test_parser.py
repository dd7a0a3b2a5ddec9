import unittest

from docx_exam.assembler import assemble_exam, build_question
from docx_exam.models import Paragraph, QuestionOption, RawQuestion
from docx_exam.parser import ExamParser


def paragraphs_of(*texts: str) -> list[Paragraph]:
    return [Paragraph(text=text) for text in texts]


class ParserTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = ExamParser({"exam": {"time_limit": 60}})

    def test_parse_three_parts(self) -> None:
        paragraphs = [
            Paragraph(text="PHẦN 1. Trắc nghiệm nhiều lựa chọn"),
            Paragraph(text="Câu 1. 2+2=?"),
            Paragraph(text="A. 3"),
            Paragraph(text="B. 4", has_underline=True, underlined_segments=("B",)),
            Paragraph(text="PHẦN 2. Đúng sai"),
            Paragraph(text="Câu 1. Xét các mệnh đề"),
            Paragraph(text="a) Đúng", has_underline=True, underlined_segments=("a",)),
            Paragraph(text="b) Sai"),
            Paragraph(text="PHẦN 3. Trả lời ngắn"),
            Paragraph(text="Câu 1. Tính 2+3"),
            Paragraph(text="Đáp án: 5"),
        ]
        document = self.parser.parse_paragraphs(paragraphs, title="Đề 01")
        self.assertEqual(document.title, "Đề 01")
        self.assertEqual(document.time_limit, 60)
        self.assertEqual([question.number for question in document.questions], [101, 201, 301])
        self.assertEqual([section.section_type for section in document.sections], [
            "multiple_choice",
            "true_false",
            "short_answer",
        ])
        self.assertEqual(document.answers, {101: "B", 301: "5"})
        self.assertEqual(document.questions[1].correct_answer, "a")
        self.assertEqual(document.questions[1].source_number, 1)

    def test_parse_three_parts_with_english_keywords(self) -> None:
        paragraphs = [
            Paragraph(text="PART 1. Multiple choice"),
            Paragraph(text="Question 1: Compute 2+2."),
            Paragraph(text="A. 3"),
            Paragraph(text="B. 4"),
            Paragraph(text="C. 5"),
            Paragraph(text="D. 6"),
            Paragraph(text="Choose B"),
            Paragraph(text="PART 2. True or false"),
            Paragraph(text="Question 1: Statement set."),
            Paragraph(text="Figure 1"),
            Paragraph(text="a) true stmt", has_underline=True, underlined_segments=("a",)),
            Paragraph(text="b) false stmt"),
            Paragraph(text="PART 3. Short answer"),
            Paragraph(text="Question 1: Value of x?"),
            Paragraph(text="Answer: 5"),
        ]
        document = self.parser.parse_paragraphs(paragraphs)
        self.assertEqual([question.number for question in document.questions], [101, 201, 301])
        multiple_choice, true_false, short_answer = document.questions
        self.assertEqual(multiple_choice.text, "Compute 2+2.")
        self.assertEqual(len(multiple_choice.options), 4)
        self.assertEqual(multiple_choice.correct_answer, "B")
        self.assertEqual(true_false.text, "Statement set.")
        self.assertEqual([option.text for option in true_false.options], ["true stmt", "false stmt"])
        self.assertEqual(true_false.correct_answer, "a")
        self.assertEqual(short_answer.options, ())
        self.assertEqual(short_answer.correct_answer, "5")
        self.assertEqual(document.answers, {101: "B", 301: "5"})

    def test_document_without_headings_is_part_one(self) -> None:
        document = self.parser.parse_paragraphs(paragraphs_of("Câu 1. x", "A. 1", "Câu 2. y", "A. 2"))
        self.assertEqual([question.number for question in document.questions], [101, 102])
        self.assertEqual(len(document.sections), 1)

    def test_sections_keep_only_non_empty_parts(self) -> None:
        document = self.parser.parse_paragraphs(
            paragraphs_of("PHẦN 3. Trả lời ngắn", "Câu 4. x", "Đáp án: 1")
        )
        self.assertEqual([section.section_type for section in document.sections], ["short_answer"])
        self.assertEqual(document.questions[0].number, 304)

    def test_custom_section_patterns(self) -> None:
        parser = ExamParser({"parsing": {"part2_patterns": [r"^Bài tập đúng sai"]}})
        ranges = parser.detect_sections(paragraphs_of("Câu 1. x", "Bài tập đúng sai", "Câu 1. y"))
        self.assertEqual(ranges.part2_start, 1)

    def test_custom_question_patterns(self) -> None:
        parser = ExamParser({"parsing": {"question_patterns": [r"^Bài\s*(\d+)\s*[.:]\s*(.*)"]}})
        parts = parser.segment(paragraphs_of("Bài 1: x", "A. 1", "Câu 2. không phải câu hỏi"))
        self.assertEqual([question.number for question in parts[1]], [1])
        self.assertEqual(parts[1][0].options[0].text, "1 Câu 2. không phải câu hỏi")

    def test_parsing_is_deterministic(self) -> None:
        paragraphs = paragraphs_of("Câu 1. x", "A. 1", "B. 2", "Chọn A")
        first = self.parser.parse_paragraphs(paragraphs)
        second = self.parser.parse_paragraphs(paragraphs)
        self.assertEqual(first, second)


class AssemblerTestCase(unittest.TestCase):
    def test_build_question_escapes_text_but_keeps_math(self) -> None:
        raw = RawQuestion(
            number=3,
            part=1,
            stem_text="So sánh $a<b$ và x<y",
            options=[QuestionOption("A", "1 & 2"), QuestionOption("B", "$$x>1$$")],
            correct_answer="A",
            solution_text="Vì <b>",
        )
        question = build_question(raw)
        self.assertEqual(question.number, 103)
        self.assertEqual(question.text, "So sánh $a<b$ và x&lt;y")
        self.assertEqual(question.options[0].text, "1 &amp; 2")
        self.assertEqual(question.options[1].text, "$$x>1$$")
        self.assertEqual(question.solution, "Vì &lt;b&gt;")
        self.assertEqual(question.part_label, "PHẦN 1")
        self.assertEqual(question.type, "multiple_choice")

    def test_build_question_lists_referenced_images(self) -> None:
        raw = RawQuestion(
            number=1,
            part=2,
            stem_text="Hình [IMAGE:img_1] và [IMAGE_RID:rId9]",
            options=[QuestionOption("a", "[IMAGE:img_0]"), QuestionOption("b", "[IMAGE:img_1]")],
        )
        self.assertEqual(build_question(raw).images, ("img_1", "img_0"))

    def test_true_false_answers_stay_out_of_answer_map(self) -> None:
        parts = {
            2: [RawQuestion(number=1, part=2, stem_text="x", correct_answer="a,c")],
            3: [RawQuestion(number=1, part=3, stem_text="y")],
        }
        document = assemble_exam(parts, title="t")
        self.assertEqual(document.answers, {})
        self.assertEqual(document.questions[0].correct_answer, "a,c")
        self.assertEqual(document.total_count, 2)

    def test_section_and_flat_lists_share_questions(self) -> None:
        parts = {1: [RawQuestion(number=1, part=1, stem_text="x", correct_answer="C")]}
        document = assemble_exam(parts)
        self.assertIs(document.sections[0].questions[0], document.questions[0])
        self.assertEqual(document.answers, {101: "C"})


if __name__ == "__main__":
    unittest.main()
