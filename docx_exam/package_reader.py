from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path

import olefile

from .exceptions import DocumentStructureError, EncryptedDocumentError, UnsupportedFileError


logger = logging.getLogger(__name__)

DOCUMENT_PART = "word/document.xml"
RELATIONSHIPS_PART = "word/_rels/document.xml.rels"
MEDIA_PREFIX = "word/media/"


class DocxPackage:
    """Named parts of an opened Word package, in archive order."""

    def __init__(self, parts: dict[str, bytes]) -> None:
        self._parts = parts

    def has_part(self, name: str) -> bool:
        return name in self._parts

    def read(self, name: str) -> bytes | None:
        return self._parts.get(name)

    def media_parts(self) -> list[tuple[str, bytes]]:
        return [
            (name, data)
            for name, data in self._parts.items()
            if name.startswith(MEDIA_PREFIX) and len(name) > len(MEDIA_PREFIX)
        ]

    def document_xml(self) -> bytes:
        data = self.read(DOCUMENT_PART)
        if data is None:
            raise DocumentStructureError("Không tìm thấy document.xml trong file Word.")
        return data

    def relationships_xml(self) -> bytes | None:
        return self.read(RELATIONSHIPS_PART)


class PackageReader:
    def open_file(self, file_path: str) -> DocxPackage:
        path = Path(file_path)
        if path.suffix.lower() != ".docx":
            raise UnsupportedFileError("Chỉ hỗ trợ file Word (.docx).")
        return self.open_bytes(path.read_bytes())

    def open_bytes(self, data: bytes) -> DocxPackage:
        if data[: len(olefile.MAGIC)] == olefile.MAGIC:
            self._reject_ole_container(data)

        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                parts: dict[str, bytes] = {}
                for info in archive.infolist():
                    if info.is_dir():
                        continue
                    parts[info.filename] = archive.read(info)
        except zipfile.BadZipFile as exc:
            raise UnsupportedFileError(f"File không phải định dạng Word (.docx): {exc}") from exc

        logger.debug("Opened package with %d parts", len(parts))
        return DocxPackage(parts)

    def _reject_ole_container(self, data: bytes) -> None:
        # Password-protected .docx files and legacy .doc files are both OLE containers.
        try:
            with olefile.OleFileIO(io.BytesIO(data)) as ole:
                if ole.exists("EncryptionInfo") or ole.exists("EncryptedPackage"):
                    raise EncryptedDocumentError("File được bảo vệ bằng mật khẩu.")
                if ole.exists("WordDocument"):
                    raise UnsupportedFileError(
                        "File Word cũ (.doc) không được hỗ trợ. Hãy lưu lại dưới dạng .docx."
                    )
        except (EncryptedDocumentError, UnsupportedFileError):
            raise
        except Exception as exc:
            raise UnsupportedFileError(f"Không đọc được file OLE: {exc}") from exc
        raise UnsupportedFileError("File OLE không chứa tài liệu Word (.docx).")
