"""
Groups raw playlist entries into categories and infers each category's kind.
"""

import logging
from collections.abc import Iterable

from iptv_catalog.models.catalog import (
    UNCATEGORIZED,
    UNKNOWN_ITEM_NAME,
    Category,
    Item,
    Kind,
    RawEntry,
)

log = logging.getLogger(__name__)

GROUP_ATTRIBUTE = "group-title"
NAME_ATTRIBUTE = "tvg-name"
LOGO_ATTRIBUTE = "tvg-logo"

# Checked in order; the first marker found in the location decides the kind
_KIND_MARKERS = (
    ("/live/", Kind.LIVE),
    ("/series/", Kind.SERIES),
    ("/movie/", Kind.MOVIE),
)


def infer_kind(location: str) -> Kind:
    """Derives a content kind from the path layout of a stream location."""
    for marker, kind in _KIND_MARKERS:
        if marker in location:
            return kind
    return Kind.UNKNOWN


def _attribute(entry: RawEntry, key: str) -> str | None:
    value = entry.attributes.get(key)
    if value is None or not value.strip():
        return None
    return value


def categorize(entries: Iterable[RawEntry]) -> list[Category]:
    """
    Groups entries by their `group-title` in a single pass.

    A category takes the kind of the first entry routed into it; later
    entries join it whatever their own location suggests.

    Returns:
        Categories in first-seen order, each holding its items in arrival order.
    """
    categories: dict[str, Category] = {}
    conflicts = 0

    for entry in entries:
        name = _attribute(entry, GROUP_ATTRIBUTE) or UNCATEGORIZED
        kind = infer_kind(entry.location)

        category = categories.get(name)
        if category is None:
            category = Category(name=name, kind=kind)
            categories[name] = category
        elif category.kind is not kind:
            conflicts += 1

        category.items.append(
            Item(
                name=_attribute(entry, NAME_ATTRIBUTE) or UNKNOWN_ITEM_NAME,
                logo=_attribute(entry, LOGO_ATTRIBUTE),
                url=entry.location,
            )
        )

    if conflicts:
        log.debug(
            f"{conflicts} entries joined a category of a different inferred kind."
        )
    return list(categories.values())
