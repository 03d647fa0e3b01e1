"""Convert provider raw hits into canonical ``Icon`` records.

Style and category are inferred from the qualified name with ordered
substring tables. Rules are evaluated top to bottom and the first match wins,
so the order of each table is part of its behaviour.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from loguru import logger

from icon_mcp.models import Icon, IconCategory, IconStyle, RawHit

_SEGMENT_SPLIT = re.compile(r"[-_]")

# (style, substrings tested against the prefix, substrings tested against the name)
STYLE_RULES: list[tuple[IconStyle, tuple[str, ...], tuple[str, ...]]] = [
    (IconStyle.SOLID, ("solid",), ("fill", "solid")),
    (IconStyle.THIN, ("thin",), ("thin",)),
    (IconStyle.DUOTONE, ("duotone",), ("duotone",)),
    (IconStyle.BOLD, ("bold",), ("bold",)),
]

# (category, keywords tested against the name)
CATEGORY_RULES: list[tuple[IconCategory, tuple[str, ...]]] = [
    (IconCategory.ARROWS, ("arrow", "chevron", "caret")),
    (IconCategory.USERS, ("user", "person", "profile", "avatar")),
    (IconCategory.FILES, ("file", "document", "page")),
    (IconCategory.ECOMMERCE, ("cart", "shop", "store", "bag")),
    (IconCategory.MEDIA, ("camera", "video", "music", "play")),
    (IconCategory.MAPS, ("map", "location", "pin", "navigation")),
    (IconCategory.BUSINESS, ("chart", "graph", "business", "analytics")),
    (IconCategory.SOCIAL, ("facebook", "twitter", "instagram", "linkedin")),
    (IconCategory.BRANDS, ("brand", "logo")),
    (IconCategory.DEVELOPMENT, ("code", "git", "development", "terminal")),
]


def split_qualified_name(qualified_name: str) -> tuple[str, str] | None:
    """Split ``prefix:name``. Returns None if either half is empty."""
    prefix, sep, name = qualified_name.partition(":")
    if not sep or not prefix or not name:
        return None
    return prefix, name


def infer_style(prefix: str, name: str) -> IconStyle:
    for style, prefix_keys, name_keys in STYLE_RULES:
        if any(k in prefix for k in prefix_keys) or any(k in name for k in name_keys):
            return style
    return IconStyle.OUTLINE


def infer_category(name: str) -> IconCategory:
    for category, keywords in CATEGORY_RULES:
        if any(k in name for k in keywords):
            return category
    return IconCategory.INTERFACE


def extract_tags(name: str) -> tuple[str, ...]:
    return tuple(part for part in _SEGMENT_SPLIT.split(name) if part)


def display_name(name: str) -> str:
    """``arrow-right_bold`` -> ``Arrow Right Bold``."""
    return " ".join(part[:1].upper() + part[1:] for part in extract_tags(name))


def normalize(raw_hit: RawHit) -> Icon | None:
    """Build an ``Icon`` from a raw hit, or None if the name is malformed."""
    parts = split_qualified_name(raw_hit.qualified_name)
    if parts is None:
        logger.debug(f"Discarding malformed hit from {raw_hit.provider}: {raw_hit.qualified_name!r}")
        return None

    prefix, name = parts
    qualified = f"{prefix}:{name}"
    return Icon(
        id=qualified,
        name=display_name(name),
        tags=extract_tags(name),
        style=infer_style(prefix, name),
        library=prefix,
        category=infer_category(name),
        qualified_name=qualified,
        source_provider=raw_hit.provider,
    )


def normalize_many(raw_hits: Iterable[RawHit]) -> list[Icon]:
    icons = []
    for hit in raw_hits:
        icon = normalize(hit)
        if icon is not None:
            icons.append(icon)
    return icons
