from __future__ import annotations

from typing import Iterable


# Messages that are already actionable and shown as-is.
_PRESERVED = ("chỉ hỗ trợ file word (.docx)",)

# (substrings of the lower-cased raw error, tips shown to the user)
_PARSE_HINTS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (
        ("mật khẩu",),
        (
            "File Word đang được đặt mật khẩu nên không thể đọc tự động.",
            "Hãy gỡ mật khẩu trong Word rồi thử lại.",
        ),
    ),
    (
        (".doc)", "file word cũ"),
        (
            "Đây là định dạng Word cũ (.doc).",
            "Mở file trong Word và chọn Lưu thành (.docx) rồi thử lại.",
        ),
    ),
    (
        ("document.xml",),
        (
            "File .docx bị hỏng hoặc thiếu nội dung chính.",
            "Hãy mở và lưu lại file bằng Word rồi thử lại.",
        ),
    ),
    (
        ("không phải định dạng word", "file ole"),
        (
            "Không nhận dạng được file Word.",
            "Kiểm tra lại rằng file có đuôi .docx và không bị hỏng.",
        ),
    ),
)

_DEFAULT_HINTS = ("Đã xảy ra lỗi khi đọc file Word.",)


def _join_lines(lines: Iterable[str]) -> str:
    return "\n".join(line for line in lines if line.strip())


def _trim_raw_error(text: str, limit: int = 700) -> str:
    raw = (text or "").strip()
    if len(raw) <= limit:
        return raw
    return raw[:limit].rstrip() + " ..."


def _hints_for(lower: str) -> tuple[str, ...]:
    for needles, hints in _PARSE_HINTS:
        if any(needle in lower for needle in needles):
            return hints
    return _DEFAULT_HINTS


def build_parse_error_message(raw_message: str) -> str:
    raw = (raw_message or "").strip()
    lower = raw.lower()
    if any(marker in lower for marker in _PRESERVED):
        return raw

    return _join_lines(
        [
            *_hints_for(lower),
            "[Lỗi gốc]",
            _trim_raw_error(raw) or "(không có)",
        ]
    )
