"""Image reference extraction from line item properties.

Storefront themes attach the customer's uploaded image as a line item
property, usually named "CustomImage" but not reliably so. A property counts
as an image reference when any of these hold:

- its name, lower-cased with all whitespace removed, is "customimage"
- that normalized name contains "image"
- its trimmed value starts with http:// or https:// (case-insensitive),
  whatever the name

Matches with an empty trimmed value are dropped. The URL-shape rule also
sweeps in unrelated URL-valued properties; it is kept for compatibility with
existing themes and is the first candidate for tightening.

This is the only place the rule lives. Normalizer adapters call it; they
never reimplement it.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")

_CUSTOM_IMAGE_NAME = "customimage"
_IMAGE_NAME_FRAGMENT = "image"


def _normalize_name(name: Any) -> str:
    return _WHITESPACE_RE.sub("", str(name or "").lower())


def is_image_reference(name: Any, value: Any) -> bool:
    """Return True if a single name/value pair is a non-empty image reference."""
    trimmed = str(value or "").strip()
    if not trimmed:
        return False
    normalized = _normalize_name(name)
    return (
        normalized == _CUSTOM_IMAGE_NAME
        or _IMAGE_NAME_FRAGMENT in normalized
        or bool(_URL_RE.match(trimmed))
    )


def extract_image_references(properties: Any) -> list[str]:
    """Return image URLs found in a line item's properties, in input order.

    Args:
        properties: Sequence of ``{"name", "value"}`` mappings (or
            LineItemProperty objects). Anything that is not a list or tuple
            yields an empty result.

    Returns:
        Trimmed values of every matching property. Duplicates within one
        call are kept; deduplication happens at the order level.
    """
    if not isinstance(properties, (list, tuple)):
        return []

    images: list[str] = []
    for prop in properties:
        if isinstance(prop, Mapping):
            name, value = prop.get("name"), prop.get("value")
        elif hasattr(prop, "name") and hasattr(prop, "value"):
            name, value = prop.name, prop.value
        else:
            continue
        if is_image_reference(name, value):
            images.append(str(value).strip())
    return images
