import unittest

from docx_exam.error_messages import build_parse_error_message


class ErrorMessageTestCase(unittest.TestCase):
    def test_parse_encrypted_message(self) -> None:
        message = build_parse_error_message("File được bảo vệ bằng mật khẩu.")
        self.assertIn("gỡ mật khẩu", message)
        self.assertIn("[Lỗi gốc]", message)

    def test_parse_legacy_doc_message(self) -> None:
        message = build_parse_error_message(
            "File Word cũ (.doc) không được hỗ trợ. Hãy lưu lại dưới dạng .docx."
        )
        self.assertIn("Lưu thành (.docx)", message)

    def test_parse_missing_document_message(self) -> None:
        message = build_parse_error_message("Không tìm thấy document.xml trong file Word.")
        self.assertIn("bị hỏng", message)

    def test_parse_default_message(self) -> None:
        message = build_parse_error_message("unknown failure")
        self.assertIn("Đã xảy ra lỗi", message)
        self.assertTrue(message.endswith("unknown failure"))

    def test_parse_empty_raw_message(self) -> None:
        self.assertTrue(build_parse_error_message("").endswith("(không có)"))

    def test_long_raw_message_is_trimmed(self) -> None:
        message = build_parse_error_message("x" * 2000)
        self.assertTrue(message.endswith(" ..."))
        self.assertLess(len(message), 800)

    def test_unsupported_extension_message_is_preserved(self) -> None:
        raw = "Chỉ hỗ trợ file Word (.docx)."
        self.assertEqual(build_parse_error_message(raw), raw)


if __name__ == "__main__":
    unittest.main()
