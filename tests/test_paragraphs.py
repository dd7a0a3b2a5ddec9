import unittest

from docx_builder import (
    break_run,
    document_xml,
    drawing_run,
    math_run,
    paragraph,
    run,
    text_paragraph,
    vml_run,
)
from docx_exam.exceptions import DocumentStructureError
from docx_exam.paragraphs import ParagraphReconstructor


def reconstruct(paragraphs, rel_to_asset=None):
    xml = document_xml(paragraphs).encode("utf-8")
    return ParagraphReconstructor(rel_to_asset).reconstruct(xml)


class ParagraphTextTestCase(unittest.TestCase):
    def test_runs_are_concatenated(self) -> None:
        result = reconstruct([paragraph(run("Câu "), run("1. "), run("Tính  tổng"))])
        self.assertEqual(len(result), 1)
        self.assertEqual(result[0].text, "Câu 1. Tính tổng")
        self.assertFalse(result[0].has_underline)

    def test_empty_paragraphs_are_dropped(self) -> None:
        result = reconstruct([paragraph(), text_paragraph("   "), text_paragraph("x")])
        self.assertEqual([p.text for p in result], ["x"])

    def test_break_becomes_newline(self) -> None:
        result = reconstruct([paragraph(run("dòng 1 "), break_run(), run(" dòng 2"))])
        self.assertEqual(result[0].text, "dòng 1\ndòng 2")

    def test_math_runs_are_included(self) -> None:
        result = reconstruct([paragraph(run("Cho "), math_run("x+1"), run(" = 2"))])
        self.assertEqual(result[0].text, "Cho x+1 = 2")

    def test_math_delimiters_are_normalized(self) -> None:
        result = reconstruct([text_paragraph(r"Giá trị \(x^2\)")])
        self.assertEqual(result[0].text, "Giá trị $x^2$")

    def test_fallback_content_is_skipped(self) -> None:
        alternate = (
            "<mc:AlternateContent>"
            f"<mc:Choice>{text_paragraph('chọn')}</mc:Choice>"
            f"<mc:Fallback>{text_paragraph('dự phòng')}</mc:Fallback>"
            "</mc:AlternateContent>"
        )
        result = reconstruct([alternate])
        self.assertEqual([p.text for p in result], ["chọn"])

    def test_malformed_xml_raises(self) -> None:
        with self.assertRaises(DocumentStructureError):
            ParagraphReconstructor().reconstruct(b"<w:document><unclosed")


class UnderlineTestCase(unittest.TestCase):
    def test_underlined_run_is_recorded(self) -> None:
        result = reconstruct([paragraph(run("B", underline=True), run(". 4"))])
        self.assertTrue(result[0].has_underline)
        self.assertEqual(result[0].underlined_segments, ("B",))
        self.assertEqual(result[0].text, "B. 4")

    def test_underline_none_is_not_underline(self) -> None:
        result = reconstruct([paragraph(run("A", underline=True, underline_value="none"), run(". 3"))])
        self.assertFalse(result[0].has_underline)

    def test_whitespace_only_underlined_run_is_ignored(self) -> None:
        result = reconstruct([paragraph(run("A. 3"), run("  ", underline=True))])
        self.assertFalse(result[0].has_underline)
        self.assertEqual(result[0].underlined_segments, ())

    def test_markdown_underline_is_unwrapped(self) -> None:
        result = reconstruct([text_paragraph("[C]{.underline}. 5")])
        self.assertEqual(result[0].text, "C. 5")
        self.assertTrue(result[0].has_underline)
        self.assertEqual(result[0].underlined_segments, ("C",))


class ImageMarkerTestCase(unittest.TestCase):
    def test_known_relationship_becomes_asset_marker(self) -> None:
        result = reconstruct(
            [paragraph(run("Xem hình"), drawing_run("rId5"), run("bên dưới"))],
            {"rId5": "img_0"},
        )
        self.assertEqual(result[0].text, "Xem hình [IMAGE:img_0] bên dưới")

    def test_same_relationship_in_one_run_gives_one_marker(self) -> None:
        result = reconstruct([paragraph(drawing_run("rId5", "rId5"))], {"rId5": "img_0"})
        self.assertEqual(result[0].text.count("[IMAGE:img_0]"), 1)

    def test_relationships_keep_first_seen_order(self) -> None:
        result = reconstruct(
            [paragraph(drawing_run("rId9", "rId5"))],
            {"rId5": "img_0", "rId9": "img_1"},
        )
        self.assertEqual(result[0].text, "[IMAGE:img_1] [IMAGE:img_0]")

    def test_unknown_relationship_falls_back_to_rid_marker(self) -> None:
        with self.assertLogs("docx_exam.paragraphs", level="WARNING"):
            result = reconstruct([paragraph(run("Hình"), drawing_run("rIdX"))])
        self.assertEqual(result[0].text, "Hình [IMAGE_RID:rIdX]")
        self.assertNotIn("[IMAGE:", result[0].text)

    def test_vml_image_data(self) -> None:
        result = reconstruct([paragraph(vml_run("rId3"))], {"rId3": "img_2"})
        self.assertEqual(result[0].text, "[IMAGE:img_2]")

    def test_image_only_paragraph_is_kept(self) -> None:
        result = reconstruct([paragraph(drawing_run("rId1"))], {"rId1": "img_0"})
        self.assertEqual(len(result), 1)
        self.assertIn("[IMAGE:img_0]", result[0].text)


if __name__ == "__main__":
    unittest.main()
