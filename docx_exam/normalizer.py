"""Text clean-up shared by paragraph reconstruction and question assembly."""

from __future__ import annotations

import html
import re
import unicodedata


_BLOCK_MATH_RE = re.compile(r"\\\[(.*?)\\\]", re.S)
_INLINE_MATH_RE = re.compile(r"\\\((.*?)\\\)", re.S)
_ALIGN_BEGIN_RE = re.compile(r"\\begin\{align\*?\}")
_ALIGN_END_RE = re.compile(r"\\end\{align\*?\}")
_DOLLAR_RUN_RE = re.compile(r"\${3,}")

_PROTECTED_DOUBLE_RE = re.compile(r"\$\$.*?\$\$", re.S)
_PROTECTED_SINGLE_RE = re.compile(r"\$(?!\$).*?\$(?!\$)", re.S)
_PLACEHOLDER_RE = re.compile(r"\x00MATH(\d+)\x00")


def normalize_unicode(text: str) -> str:
    if not text:
        return ""
    return unicodedata.normalize("NFC", text)


def normalize_math_delimiters(text: str) -> str:
    if not text:
        return ""
    s = _BLOCK_MATH_RE.sub(lambda m: f"$${m.group(1)}$$", text)
    s = _INLINE_MATH_RE.sub(lambda m: f"${m.group(1)}$", s)
    # MathJax only accepts "aligned" inside $...$
    s = _ALIGN_BEGIN_RE.sub(r"\\begin{aligned}", s)
    s = _ALIGN_END_RE.sub(r"\\end{aligned}", s)
    return _DOLLAR_RUN_RE.sub("$$", s)


def collapse_whitespace(text: str) -> str:
    if not text:
        return ""
    s = re.sub(r"[ \t]+", " ", text)
    s = re.sub(r"\n{3,}", "\n\n", s)
    return s.strip()


def normalize_text(text: str) -> str:
    """NFC, then math delimiters, then whitespace.

    Math runs first so that ``\\[`` / ``\\(`` pairs are still intact when the
    whitespace between them is collapsed.
    """
    return collapse_whitespace(normalize_math_delimiters(normalize_unicode(text)))


def escape_html_preserve_math(text: str) -> str:
    if not text:
        return ""

    protected: list[str] = []

    def _protect(match: re.Match[str]) -> str:
        protected.append(match.group(0))
        return f"\x00MATH{len(protected) - 1}\x00"

    s = _PROTECTED_DOUBLE_RE.sub(_protect, text)
    s = _PROTECTED_SINGLE_RE.sub(_protect, s)
    s = html.escape(s, quote=False)
    return _PLACEHOLDER_RE.sub(lambda m: protected[int(m.group(1))], s)
