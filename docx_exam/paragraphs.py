from __future__ import annotations

import logging
import re
from typing import Iterator, Optional

from lxml import etree

from .exceptions import DocumentStructureError
from .models import Paragraph
from .normalizer import normalize_text


logger = logging.getLogger(__name__)

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
M_NS = "http://schemas.openxmlformats.org/officeDocument/2006/math"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
V_NS = "urn:schemas-microsoft-com:vml"
O_NS = "urn:schemas-microsoft-com:office:office"
MC_NS = "http://schemas.openxmlformats.org/markup-compatibility/2006"

W_P = f"{{{W_NS}}}p"
W_R = f"{{{W_NS}}}r"
W_T = f"{{{W_NS}}}t"
W_INSTR_TEXT = f"{{{W_NS}}}instrText"
W_BR = f"{{{W_NS}}}br"
W_CR = f"{{{W_NS}}}cr"
W_TAB = f"{{{W_NS}}}tab"
W_RPR = f"{{{W_NS}}}rPr"
W_U = f"{{{W_NS}}}u"
W_VAL = f"{{{W_NS}}}val"
W_DRAWING = f"{{{W_NS}}}drawing"
M_R = f"{{{M_NS}}}r"
M_T = f"{{{M_NS}}}t"
A_BLIP = f"{{{A_NS}}}blip"
R_EMBED = f"{{{R_NS}}}embed"
R_ID = f"{{{R_NS}}}id"
V_IMAGEDATA = f"{{{V_NS}}}imagedata"
O_RELID = f"{{{O_NS}}}relid"
MC_FALLBACK = f"{{{MC_NS}}}Fallback"

RUN_TAGS = (W_R, M_R)
TEXT_TAGS = (W_T, M_T, W_INSTR_TEXT)
BREAK_TAGS = (W_BR, W_CR)

IMAGE_MARKER = "[IMAGE:{}]"
IMAGE_RID_MARKER = "[IMAGE_RID:{}]"

_MARKDOWN_UNDERLINE_RE = re.compile(r"\[([A-Da-d])\]\{\.underline\}")
_NEWLINE_PADDING_RE = re.compile(r"[ \t]*\n[ \t]*")

_XML_PARSER = etree.XMLParser(resolve_entities=False, huge_tree=True)


def _nearest(element: etree._Element, tags: tuple[str, ...]) -> Optional[etree._Element]:
    parent = element.getparent()
    while parent is not None:
        if parent.tag in tags:
            return parent
        parent = parent.getparent()
    return None


def _inside_fallback(element: etree._Element) -> bool:
    return _nearest(element, (MC_FALLBACK,)) is not None


class ParagraphReconstructor:
    def __init__(self, rel_to_asset: Optional[dict[str, str]] = None) -> None:
        self.rel_to_asset = rel_to_asset or {}

    def reconstruct(self, document_xml: bytes) -> list[Paragraph]:
        try:
            root = etree.fromstring(document_xml, parser=_XML_PARSER)
        except etree.XMLSyntaxError as exc:
            raise DocumentStructureError(f"document.xml không hợp lệ: {exc}") from exc

        paragraphs: list[Paragraph] = []
        for element in root.iter(W_P):
            # mc:Fallback repeats the mc:Choice content for older readers.
            if _inside_fallback(element):
                continue
            paragraph = self._build_paragraph(element)
            if paragraph is not None:
                paragraphs.append(paragraph)
        logger.info("Reconstructed %d paragraphs", len(paragraphs))
        return paragraphs

    def _build_paragraph(self, element: etree._Element) -> Optional[Paragraph]:
        text = ""
        has_underline = False
        underlined_segments: list[str] = []

        for run in self._owned_runs(element):
            run_text = self._run_text(run) + self._run_image_markers(run)
            if self._is_underlined(run) and run_text.strip():
                has_underline = True
                underlined_segments.append(run_text.strip())
            text += run_text

        text = normalize_text(text.strip())

        for match in _MARKDOWN_UNDERLINE_RE.finditer(text):
            has_underline = True
            underlined_segments.append(match.group(1))
        text = _MARKDOWN_UNDERLINE_RE.sub(r"\1", text)
        text = _NEWLINE_PADDING_RE.sub("\n", text).strip()

        if not text:
            return None
        return Paragraph(
            text=text,
            has_underline=has_underline,
            underlined_segments=tuple(underlined_segments),
        )

    def _owned_runs(self, element: etree._Element) -> Iterator[etree._Element]:
        for run in element.iter(*RUN_TAGS):
            if _nearest(run, (W_P, *RUN_TAGS)) is element:
                yield run

    def _owned_by(self, node: etree._Element, run: etree._Element) -> bool:
        return _nearest(node, (W_P, *RUN_TAGS)) is run

    def _run_text(self, run: etree._Element) -> str:
        chunks: list[str] = []
        for node in run.iter(*TEXT_TAGS, *BREAK_TAGS, W_TAB):
            if not self._owned_by(node, run):
                continue
            if node.tag in BREAK_TAGS:
                chunks.append("\n")
            elif node.tag == W_TAB:
                chunks.append("\t")
            else:
                chunks.append(node.text or "")
        return "".join(chunks)

    def _run_image_markers(self, run: etree._Element) -> str:
        rel_ids: dict[str, None] = {}
        for blip in run.iter(A_BLIP):
            if not self._owned_by(blip, run) or _nearest(blip, (W_DRAWING,)) is None:
                continue
            embed = blip.get(R_EMBED)
            if embed:
                rel_ids.setdefault(embed, None)
        for image_data in run.iter(V_IMAGEDATA):
            if not self._owned_by(image_data, run):
                continue
            rel_id = image_data.get(R_ID) or image_data.get(O_RELID)
            if rel_id:
                rel_ids.setdefault(rel_id, None)

        markers = ""
        for rel_id in rel_ids:
            asset_id = self.rel_to_asset.get(rel_id)
            if asset_id:
                markers += f" {IMAGE_MARKER.format(asset_id)} "
            else:
                logger.warning("Image relationship %s has no extracted asset", rel_id)
                markers += f" {IMAGE_RID_MARKER.format(rel_id)} "
        return markers

    def _is_underlined(self, run: etree._Element) -> bool:
        properties = run.find(W_RPR)
        if properties is None:
            return False
        underline = properties.find(W_U)
        return underline is not None and underline.get(W_VAL) != "none"
