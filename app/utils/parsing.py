from __future__ import annotations
import re
from typing import Optional
from bs4 import BeautifulSoup

from app.utils.helpers import normalize_whitespace

HEADING_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)(?:\s+#+)?\s*$")
FENCE_RE = re.compile(r"^\s{0,3}(```|~~~)")
HTML_RE = re.compile(
    r"<\s*(html|body|h[1-6]|p|div|ul|ol|li|section|article|table|br)\b[^>]*>",
    re.I,
)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
BLOCK_TAGS = HEADING_TAGS + ["p", "li", "blockquote", "pre", "td", "th", "dt", "dd"]

# (heading, level, paragraphs)
RawSection = tuple[Optional[str], int, list[str]]


def looks_like_html(text: str) -> bool:
    return bool(HTML_RE.search(text))


def _paragraphs(lines: list[str]) -> list[str]:
    out: list[str] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line)
        elif current:
            out.append(normalize_whitespace(" ".join(current)))
            current = []
    if current:
        out.append(normalize_whitespace(" ".join(current)))
    return [p for p in out if p]


def markdown_sections(text: str) -> list[RawSection]:
    sections: list[RawSection] = []
    heading: Optional[str] = None
    level = 0
    lines: list[str] = []
    in_fence = False

    for line in text.splitlines():
        if FENCE_RE.match(line):
            in_fence = not in_fence
            lines.append(line)
            continue
        m = None if in_fence else HEADING_RE.match(line)
        if m:
            sections.append((heading, level, _paragraphs(lines)))
            heading = normalize_whitespace(m.group(2)) or None
            level = len(m.group(1))
            lines = []
        else:
            lines.append(line)
    sections.append((heading, level, _paragraphs(lines)))

    # drop the untitled preamble when it is empty
    return [s for s in sections if s[0] is not None or s[2]]


def html_sections(html: str) -> list[RawSection]:
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()

    sections: list[RawSection] = []
    heading: Optional[str] = None
    level = 0
    paragraphs: list[str] = []
    found_blocks = False

    for el in soup.find_all(BLOCK_TAGS):
        # nested blocks are covered by their outermost block
        if el.find_parent(BLOCK_TAGS) is not None:
            continue
        found_blocks = True
        text = normalize_whitespace(el.get_text(" "))
        if el.name in HEADING_TAGS:
            sections.append((heading, level, paragraphs))
            heading = text or None
            level = int(el.name[1])
            paragraphs = []
        elif text:
            paragraphs.append(text)
    sections.append((heading, level, paragraphs))

    if not found_blocks:
        body_text = normalize_whitespace(soup.get_text(" "))
        return [(None, 0, [body_text])] if body_text else []

    return [s for s in sections if s[0] is not None or s[2]]
