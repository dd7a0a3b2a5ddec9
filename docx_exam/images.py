from __future__ import annotations

import logging
import posixpath

from lxml import etree

from .models import ImageAsset
from .package_reader import DocxPackage


logger = logging.getLogger(__name__)

PACKAGE_RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

DEFAULT_MIME_TYPE = "image/png"

_RELS_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "svg": "image/svg+xml",
    "emf": "image/x-emf",
    "wmf": "image/x-wmf",
    "tif": "image/tiff",
    "tiff": "image/tiff",
}


def guess_mime_type(filename: str, default: str = DEFAULT_MIME_TYPE) -> str:
    _, _, ext = filename.rpartition(".")
    mime = MIME_TYPES.get(ext.lower()) if ext != filename else None
    if mime is None:
        logger.warning("Unknown image extension for %s, using %s", filename, default)
        return default
    return mime


def parse_media_relationships(rels_xml: bytes | None) -> dict[str, str]:
    """Map relationship id -> media file name from ``document.xml.rels``.

    A missing or malformed part yields an empty map.
    """
    if not rels_xml:
        return {}
    try:
        root = etree.fromstring(rels_xml, parser=_RELS_PARSER)
    except etree.XMLSyntaxError as exc:
        logger.warning("Relationship table is malformed, image references stay unresolved: %s", exc)
        return {}

    relationships: dict[str, str] = {}
    for rel in root.iter(f"{{{PACKAGE_RELATIONSHIPS_NS}}}Relationship"):
        rel_id = rel.get("Id")
        target = rel.get("Target") or ""
        if not rel_id or "media/" not in target:
            continue
        relationships[rel_id] = posixpath.basename(target)
    return relationships


class ImageExtractor:
    def __init__(self, default_mime_type: str = DEFAULT_MIME_TYPE) -> None:
        self.default_mime_type = default_mime_type

    def extract(self, package: DocxPackage) -> tuple[list[ImageAsset], dict[str, str]]:
        """Return the media assets and a relationship id -> asset id index."""
        rel_to_filename = parse_media_relationships(package.relationships_xml())

        assets: list[ImageAsset] = []
        filename_to_asset: dict[str, str] = {}
        for part_name, payload in package.media_parts():
            filename = posixpath.basename(part_name)
            asset_id = f"img_{len(assets)}"
            relationship_id = next(
                (rid for rid, name in rel_to_filename.items() if name == filename),
                None,
            )
            assets.append(
                ImageAsset(
                    id=asset_id,
                    filename=filename,
                    payload=payload,
                    mime_type=guess_mime_type(filename, self.default_mime_type),
                    relationship_id=relationship_id,
                )
            )
            filename_to_asset.setdefault(filename, asset_id)

        rel_to_asset: dict[str, str] = {}
        for rid, filename in rel_to_filename.items():
            asset_id = filename_to_asset.get(filename)
            if asset_id is None:
                logger.warning("Relationship %s targets missing media file %s", rid, filename)
                continue
            rel_to_asset[rid] = asset_id

        unlinked = [asset.filename for asset in assets if asset.relationship_id is None]
        if unlinked:
            logger.info("Images without a relationship entry: %s", ", ".join(unlinked))
        return assets, rel_to_asset
