"""Pure helpers for the markdown structure the splitter tracks.

Headings drive the outline snapshot attached to each chunk; links and
images are swapped for ordinal placeholders so chunk text can be sent to a
model without long URLs, and restored afterwards.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, NamedTuple


HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*$", re.MULTILINE)
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
# Negative lookbehind: an already substituted image must not match as a link.
LINK_PATTERN = re.compile(r"(?<!!)\[([^\]]+)\]\(([^)]+)\)")
PLACEHOLDER_PATTERN = re.compile(r"\{\{\$(url|img)(\d+)\}\}")

MAX_HEADING_LEVEL = 6


class Heading(NamedTuple):
    level: int
    title: str
    offset: int


class LinkExtraction(NamedTuple):
    content: str
    urls: List[str]
    images: List[str]


def extract_headings(text: str) -> List[Heading]:
    """Return the ATX headings in *text* in encounter order.

    ``offset`` is the position of the heading's first ``#`` within *text*.
    """
    return [
        Heading(level=len(match.group(1)), title=match.group(2).strip(), offset=match.start())
        for match in HEADING_PATTERN.finditer(text)
    ]


def update_headers(headers: Dict[int, str], headings: Iterable[Heading]) -> Dict[int, str]:
    """Fold *headings* into an outline snapshot and return a new dict.

    A heading replaces its own level and drops every deeper level, since
    those belonged to the subsection it closes. *headers* is not mutated.
    """
    current = dict(headers)
    for heading in headings:
        current = {level: title for level, title in current.items() if level < heading.level}
        current[heading.level] = heading.title
    return current


def extract_links_and_images(text: str) -> LinkExtraction:
    """Replace markdown images and links with ordinal placeholders.

    ``![alt](src)`` becomes ``![alt]({{$img<N>}})`` and ``[text](href)``
    becomes ``[text]({{$url<N>}})``, N counting from 0 within *text*. Images
    are replaced first.
    """
    images: List[str] = []
    urls: List[str] = []

    def _image(match: re.Match) -> str:
        images.append(match.group(2))
        return f"![{match.group(1)}]({{{{$img{len(images) - 1}}}}})"

    def _link(match: re.Match) -> str:
        urls.append(match.group(2))
        return f"[{match.group(1)}]({{{{$url{len(urls) - 1}}}}})"

    content = IMAGE_PATTERN.sub(_image, text)
    content = LINK_PATTERN.sub(_link, content)
    return LinkExtraction(content=content, urls=urls, images=images)


def restore_links(content: str, urls: List[str], images: List[str]) -> str:
    """Substitute placeholders in *content* back with their targets.

    Placeholders whose index is out of range are left untouched.
    """

    def _restore(match: re.Match) -> str:
        targets = urls if match.group(1) == "url" else images
        index = int(match.group(2))
        if index < len(targets):
            return targets[index]
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_restore, content)


def section_starts(text: str) -> List[int]:
    """Return offsets of heading lines, excluding a heading at offset 0."""
    return [heading.offset for heading in extract_headings(text) if heading.offset > 0]
