"""Media classification by file extension."""

import logging
import posixpath
from collections.abc import Iterable
from urllib.parse import urlparse

from ..models import MediaItem, MediaKind

logger = logging.getLogger(__name__)

# Case-sensitive: "photo.JPG" is not recognised
EXTENSION_KINDS: dict[str, MediaKind] = {
    "jpg": MediaKind.PHOTO,
    "jpeg": MediaKind.PHOTO,
    "png": MediaKind.PHOTO,
    "mp4": MediaKind.VIDEO,
    "mov": MediaKind.VIDEO,
    "gif": MediaKind.ANIMATION,
}


def get_extension(locator: str) -> str:
    """Return the suffix after the last dot of the locator's path, or ''."""
    path = urlparse(locator).path
    _, extension = posixpath.splitext(path)
    return extension[1:]


def classify(locator: str) -> MediaKind | None:
    """Map a locator to its media kind, None when the extension is unsupported."""
    return EXTENSION_KINDS.get(get_extension(locator))


def classify_all(locators: Iterable[str]) -> list[MediaItem]:
    """Classify locators in order, dropping the unsupported ones."""
    items: list[MediaItem] = []
    skipped = 0

    for locator in locators:
        kind = classify(locator)
        if kind is None:
            skipped += 1
            continue
        items.append(MediaItem(kind=kind, locator=locator))

    if skipped:
        logger.debug(f"Skipped {skipped} media with unsupported extensions")

    return items
