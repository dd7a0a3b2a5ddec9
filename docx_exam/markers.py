"""Inline image marker substitution after assets have been uploaded elsewhere.

Markers produced by the parser are ``[IMAGE:img_N]`` (resolved asset) and
``[IMAGE_RID:rIdN]`` (relationship without an extracted asset). Once the
caller has uploaded the assets it maps local ids to remote ids; every marker
whose key is in the lookup becomes ``[IMAGE:<remote id>]`` and every other
marker is left exactly as it was.

The parser only writes ``[IMAGE_RID:...]`` for relationships it could not
resolve to an asset, so ``relationship_lookup`` never rewrites those. It
serves text built outside the parser that refers to images by relationship
id while the asset itself was extracted.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Mapping, Optional

from .models import ExamDocument, ImageAsset, Question, QuestionOption, Section


_ASSET_MARKER_RE = re.compile(r"\[IMAGE:([^\]\s]+)\]")
_RID_MARKER_RE = re.compile(r"\[IMAGE_RID:([^\]\s]+)\]")


def replace_image_markers(
    text: str,
    asset_to_remote: Mapping[str, str],
    rid_to_remote: Optional[Mapping[str, str]] = None,
) -> str:
    if not text:
        return ""
    rid_to_remote = rid_to_remote or {}

    def _asset(match: re.Match[str]) -> str:
        remote = asset_to_remote.get(match.group(1))
        return f"[IMAGE:{remote}]" if remote else match.group(0)

    def _rid(match: re.Match[str]) -> str:
        remote = rid_to_remote.get(match.group(1))
        return f"[IMAGE:{remote}]" if remote else match.group(0)

    return _RID_MARKER_RE.sub(_rid, _ASSET_MARKER_RE.sub(_asset, text))


def relationship_lookup(
    images: list[ImageAsset], asset_to_remote: Mapping[str, str]
) -> dict[str, str]:
    """Relationship id -> remote id, for extracted assets only."""
    lookup: dict[str, str] = {}
    for image in images:
        remote = asset_to_remote.get(image.id)
        if image.relationship_id and remote:
            lookup[image.relationship_id] = remote
    return lookup


def apply_uploaded_images(
    document: ExamDocument, asset_to_remote: Mapping[str, str]
) -> ExamDocument:
    """Return a copy of ``document`` with markers pointing at remote ids."""
    rid_to_remote = relationship_lookup(document.images, asset_to_remote)

    def _sub(text: str) -> str:
        return replace_image_markers(text, asset_to_remote, rid_to_remote)

    def _question(question: Question) -> Question:
        return replace(
            question,
            text=_sub(question.text),
            solution=_sub(question.solution),
            options=tuple(
                QuestionOption(letter=option.letter, text=_sub(option.text))
                for option in question.options
            ),
            images=tuple(asset_to_remote.get(image, image) for image in question.images),
        )

    converted = {id(question): _question(question) for question in document.questions}
    sections = [
        Section(
            name=section.name,
            description=section.description,
            section_type=section.section_type,
            questions=[converted[id(question)] for question in section.questions],
        )
        for section in document.sections
    ]
    return ExamDocument(
        title=document.title,
        time_limit=document.time_limit,
        sections=sections,
        questions=[converted[id(question)] for question in document.questions],
        answers=dict(document.answers),
        images=list(document.images),
    )
