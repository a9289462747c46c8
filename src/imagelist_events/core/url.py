"""Helpers for URLs and image references."""
import re
from typing import Optional
from urllib.parse import urljoin, urlsplit

from imagelist_events.core.errors import URLParseError

__all__ = ["TAG_REGEXP", "join_url", "has_tag", "strip_tag", "extract_tag"]

# matches a trailing `:<tag>`, tags follow the Docker reference grammar.
TAG_REGEXP = re.compile(r":([\w][\w.-]{0,127})$")


def join_url(base: str, path: str) -> str:
    """Resolves a path against a base URL.

    Resolution follows RFC 3986 so an absolute path (i.e. `/images`) replaces
    the path of the base URL while a relative one is appended to the base's
    last directory.

    Arguments:
        base: the base URL (i.e. `http://imagelist:8080/`).
        path: the reference to resolve (i.e. `/images`).

    Returns:
        The resolved URL.

    Raises:
        URLParseError: if any of the inputs is not a valid URL.
    """
    try:
        parsed_base = urlsplit(base)
        urlsplit(path)

    except ValueError as exc:
        raise URLParseError(f"invalid url: {exc}") from exc

    if not parsed_base.scheme or not parsed_base.netloc:
        raise URLParseError(f"invalid url {base!r}: missing scheme or host")

    return urljoin(base, path)


def has_tag(name: str) -> bool:
    """Checks if an image reference ends with a tag."""
    return TAG_REGEXP.search(name) is not None


def strip_tag(name: str) -> str:
    """Removes the tag from an image reference.

    Arguments:
        name: the image reference (i.e. `quay.io/foo/bar:v1`).

    Returns:
        The reference without its tag (i.e. `quay.io/foo/bar`). References
        without a tag are returned unchanged.
    """
    return TAG_REGEXP.sub("", name)


def extract_tag(name: str) -> Optional[str]:
    """Gets the tag of an image reference, `None` if it has none."""
    match = TAG_REGEXP.search(name)
    if match is None:
        return None

    return match.group(1)
