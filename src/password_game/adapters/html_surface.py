"""HTML rendering surface: the password as the game's rich-text box would hold it."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from bs4 import BeautifulSoup, NavigableString, Tag

from password_game.core.changes import Append, Change, Format, Insert, Prepend, Remove, Replace
from password_game.core.errors import InvariantBreachError
from password_game.core.password import split_graphemes
from password_game.domain.models import (
    DEFAULT_FONT_SIZE,
    FontFamily,
    Formatting,
    font_size_for_square,
)

logger = logging.getLogger(__name__)

FAMILY_CSS: dict[FontFamily, str] = {
    "monospace": "Monospace",
    "comic_sans": "Comic Sans",
    "wingdings": "Wingdings",
    "times_new_roman": "Times New Roman",
}
_CSS_FAMILY: dict[str, FontFamily] = {css.lower(): family for family, css in FAMILY_CSS.items()}
_STYLE_DECLARATION = re.compile(r"\s*([a-z-]+)\s*:\s*([^;]+?)\s*(?:;|$)")
_FONT_SIZE = re.compile(r"^(\d+)px$")


def render_password_html(text: str, formatting: Sequence[Formatting]) -> str:
    """Render one styled span per grapheme, wrapped in ``strong``/``em`` as needed."""
    graphemes = split_graphemes(text)
    if len(graphemes) != len(formatting):
        raise InvariantBreachError(
            f"Cannot render {len(graphemes)} graphemes with {len(formatting)} formatting records."
        )
    soup = BeautifulSoup("", "html.parser")
    root = soup.new_tag("div", attrs={"class": "password"})
    soup.append(root)
    for grapheme, record in zip(graphemes, formatting):
        span = soup.new_tag(
            "span",
            attrs={
                "style": (
                    f"font-family: {FAMILY_CSS[record.font_family]}; "
                    f"font-size: {record.font_size}px"
                )
            },
        )
        span.string = grapheme
        node: Tag = span
        if record.italic:
            wrapper = soup.new_tag("em")
            wrapper.append(node)
            node = wrapper
        if record.bold:
            wrapper = soup.new_tag("strong")
            wrapper.append(node)
            node = wrapper
        root.append(node)
    return str(soup)


def _style_of(string: NavigableString) -> tuple[FontFamily, int]:
    family: FontFamily = "monospace"
    size = DEFAULT_FONT_SIZE
    span = string.find_parent("span")
    style = span.get("style") if span is not None else None
    if not isinstance(style, str):
        return family, size
    for prop, value in _STYLE_DECLARATION.findall(style.lower()):
        if prop == "font-family":
            family = _CSS_FAMILY.get(value.strip("'\""), family)
        elif prop == "font-size":
            match = _FONT_SIZE.match(value)
            if match is not None:
                size = int(match.group(1))
    return family, size


def parse_password_html(html: str) -> tuple[str, list[Formatting]]:
    """Read text and per-grapheme formatting back out of rendered HTML."""
    soup = BeautifulSoup(html, "html.parser")
    root = soup.select_one("div.password") or soup
    text_parts: list[str] = []
    formatting: list[Formatting] = []
    for string in root.find_all(string=True):
        if not isinstance(string, NavigableString) or not str(string):
            continue
        family, size = _style_of(string)
        record = Formatting(
            bold=string.find_parent("strong") is not None,
            italic=string.find_parent("em") is not None,
            font_size=font_size_for_square(size),
            font_family=family,
        )
        graphemes = split_graphemes(str(string))
        text_parts.extend(graphemes)
        formatting.extend([record] * len(graphemes))
    return "".join(text_parts), formatting


class HtmlEntrySurface:
    """A rendering surface that receives batches the way a person would type them.

    Changes arrive in entry order, so removals come lowest index first; each removal is
    shifted left by the number already made in the batch.
    """

    def __init__(self, html: str | None = None) -> None:
        self.html = html if html is not None else render_password_html("", [])

    def apply(self, batch: Sequence[Change]) -> None:
        text, formatting = parse_password_html(self.html)
        cells = list(zip(split_graphemes(text), formatting))
        removed_count = 0
        for change in batch:
            if isinstance(change, Format):
                self._check(change.index, cells)
                grapheme, record = cells[change.index]
                cells[change.index] = (grapheme, record.changed(change.change))
            elif isinstance(change, Prepend):
                cells[:0] = [(g, Formatting()) for g in split_graphemes(change.string)]
            elif isinstance(change, Append):
                cells.extend((g, Formatting()) for g in split_graphemes(change.string))
            elif isinstance(change, Insert):
                if change.index < 0 or change.index > len(cells):
                    raise InvariantBreachError(f"Surface insert index {change.index} out of range.")
                cells[change.index : change.index] = [
                    (g, Formatting()) for g in split_graphemes(change.string)
                ]
            elif isinstance(change, Replace):
                self._check(change.index, cells)
                cells[change.index] = (change.new_grapheme, cells[change.index][1])
            elif isinstance(change, Remove):
                index = change.index - removed_count
                self._check(index, cells)
                del cells[index]
                removed_count += 1
        self.html = render_password_html(
            "".join(grapheme for grapheme, _ in cells), [record for _, record in cells]
        )
        logger.debug("surface.apply changes=%s length=%s", len(batch), len(cells))

    def get_current_text_and_formatting(self) -> tuple[str, list[Formatting]]:
        return parse_password_html(self.html)

    @staticmethod
    def _check(index: int, cells: Sequence[tuple[str, Formatting]]) -> None:
        if index < 0 or index >= len(cells):
            raise InvariantBreachError(f"Surface index {index} outside 0..{len(cells) - 1}.")
