import unittest

from docx_exam.normalizer import (
    collapse_whitespace,
    escape_html_preserve_math,
    normalize_math_delimiters,
    normalize_text,
)


class MathDelimiterTestCase(unittest.TestCase):
    def test_block_and_inline_delimiters(self) -> None:
        self.assertEqual(normalize_math_delimiters(r"Tính \[x^2\] và \(y\)"), "Tính $$x^2$$ và $y$")

    def test_align_becomes_aligned(self) -> None:
        text = r"$\begin{align*} a &= b \end{align*}$"
        self.assertEqual(
            normalize_math_delimiters(text),
            r"$\begin{aligned} a &= b \end{aligned}$",
        )

    def test_dollar_runs_collapse_to_two(self) -> None:
        self.assertEqual(normalize_math_delimiters("$$$x$$$$"), "$$x$$")

    def test_normalize_text_is_idempotent(self) -> None:
        raw = "Cho  \\(a\\)\t và \\[b\\]\n\n\n\nkết thúc  "
        once = normalize_text(raw)
        self.assertEqual(once, "Cho $a$ và $$b$$\n\nkết thúc")
        self.assertEqual(normalize_text(once), once)

    def test_normalize_text_composes_unicode(self) -> None:
        decomposed = "Ca\u0302u 1"
        self.assertEqual(normalize_text(decomposed), "C\u00e2u 1")

    def test_collapse_whitespace_keeps_single_blank_line(self) -> None:
        self.assertEqual(collapse_whitespace("a\n\n\n\nb"), "a\n\nb")
        self.assertEqual(collapse_whitespace("a\nb"), "a\nb")


class EscapeHtmlTestCase(unittest.TestCase):
    def test_math_span_is_not_escaped(self) -> None:
        escaped = escape_html_preserve_math("<b>x</b> and $a<b$")
        self.assertEqual(escaped, "&lt;b&gt;x&lt;/b&gt; and $a<b$")

    def test_block_math_is_not_escaped(self) -> None:
        escaped = escape_html_preserve_math("x & y $$a>b & c$$")
        self.assertEqual(escaped, "x &amp; y $$a>b & c$$")

    def test_plain_text_and_empty(self) -> None:
        self.assertEqual(escape_html_preserve_math("1 < 2"), "1 &lt; 2")
        self.assertEqual(escape_html_preserve_math(""), "")


if __name__ == "__main__":
    unittest.main()
