"""Element Extractor - inventory of interactive elements in raw HTML.

Parses markup with BeautifulSoup and runs one scan per category
(buttons, text inputs, selects, forms, links). Every match gets a CSS-style
selector built from its id or its tag name and classes.

Selectors are best-effort: two elements with the same tag and no id/class
produce the same selector, and nothing reports it.
"""

from typing import Callable, List, Union

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup
from loguru import logger

from tagscope.browser.elements import (
    ButtonElement,
    FormElement,
    InputElement,
    InteractiveElement,
    LinkElement,
    SelectElement,
)

BUTTON_INPUT_TYPES = {"button", "submit"}
TEXT_INPUT_TYPES = {"text", "search", "email", "password"}


class UnparsableDocumentError(Exception):
    """Raised when fetched content cannot be interpreted as markup."""


def build_selector(tag: Tag) -> str:
    """Return ``#id`` when the tag has one, else ``tag.class1.class2``."""
    element_id = tag.get("id")
    if element_id:
        return f"#{element_id}"

    selector = tag.name.lower()
    class_attr = tag.get("class")
    if class_attr is not None:
        selector += "".join(f".{token}" for token in class_attr.split())
    return selector


def _attributes(tag: Tag) -> dict:
    return dict(tag.attrs)


# ── Category predicates ──────────────────────────────────────────────────


def _is_button(tag: Tag) -> bool:
    if tag.name == "button":
        return True
    return tag.name == "input" and tag.get("type") in BUTTON_INPUT_TYPES


def _is_text_input(tag: Tag) -> bool:
    return tag.name == "input" and tag.get("type") in TEXT_INPUT_TYPES


def _is_select(tag: Tag) -> bool:
    return tag.name == "select"


def _is_form(tag: Tag) -> bool:
    return tag.name == "form"


def _is_link(tag: Tag) -> bool:
    return tag.name == "a"


# ── Element builders ─────────────────────────────────────────────────────


def _button(tag: Tag) -> ButtonElement:
    text = tag.get_text().strip() or tag.get("value") or "Unnamed Button"
    return ButtonElement(
        tag_name=tag.name,
        attributes=_attributes(tag),
        selector=build_selector(tag),
        text=text,
    )


def _text_input(tag: Tag) -> InputElement:
    return InputElement(
        tag_name=tag.name,
        attributes=_attributes(tag),
        selector=build_selector(tag),
        placeholder=tag.get("placeholder") or "No placeholder",
        input_type=tag.get("type", ""),
    )


def _select(tag: Tag) -> SelectElement:
    options = [option.get_text().strip() for option in tag.find_all("option")]
    return SelectElement(
        tag_name=tag.name,
        attributes=_attributes(tag),
        selector=build_selector(tag),
        options=options,
    )


def _form(tag: Tag) -> FormElement:
    return FormElement(
        tag_name=tag.name,
        attributes=_attributes(tag),
        selector=build_selector(tag),
        action=tag.get("action") or "No action specified",
        method=tag.get("method") or "get",
    )


def _link(tag: Tag) -> LinkElement:
    return LinkElement(
        tag_name=tag.name,
        attributes=_attributes(tag),
        selector=build_selector(tag),
        text=tag.get_text().strip() or "Unnamed Link",
        href=tag.get("href") or "#",
    )


class ElementExtractor:
    """Scan parsed HTML for interactive elements."""

    # Scan order is part of the output contract
    CATEGORIES: List[tuple] = [
        ("button", _is_button, _button),
        ("input", _is_text_input, _text_input),
        ("select", _is_select, _select),
        ("form", _is_form, _form),
        ("link", _is_link, _link),
    ]

    def parse(self, html: Union[str, bytes]) -> BeautifulSoup:
        """Parse markup into a BeautifulSoup tree.

        Raises:
            UnparsableDocumentError: If the content is not markup
        """
        if not isinstance(html, (str, bytes)):
            raise UnparsableDocumentError(
                f"Expected HTML text, got {type(html).__name__}"
            )
        if ("\x00" if isinstance(html, str) else b"\x00") in html:
            raise UnparsableDocumentError("Content looks binary (NUL bytes found)")

        # lxml closes <option>, <a> and <p> implicitly the way browsers do
        try:
            return BeautifulSoup(html, "lxml", multi_valued_attributes=None)
        except ParserRejectedMarkup as e:
            raise UnparsableDocumentError(f"Parser rejected markup: {e}") from e

    def extract(self, html: Union[str, bytes]) -> List[InteractiveElement]:
        """Return every interactive element, grouped by category in scan order.

        Args:
            html: Raw HTML (well-formed or tag soup)

        Returns:
            Ordered list of elements; empty when nothing matches
        """
        soup = self.parse(html)
        return self.extract_from_soup(soup)

    def extract_from_soup(self, soup: BeautifulSoup) -> List[InteractiveElement]:
        elements: List[InteractiveElement] = []
        for category, predicate, build in self.CATEGORIES:
            matches = self._scan(soup, predicate)
            elements.extend(build(tag) for tag in matches)
            logger.debug(f"[ElementExtractor] {category}: {len(matches)} match(es)")

        logger.info(f"[ElementExtractor] Extracted {len(elements)} interactive elements")
        return elements

    @staticmethod
    def _scan(soup: BeautifulSoup, predicate: Callable[[Tag], bool]) -> List[Tag]:
        return soup.find_all(predicate)


def extract_elements(html: Union[str, bytes]) -> List[InteractiveElement]:
    """Convenience wrapper around ``ElementExtractor().extract``."""
    return ElementExtractor().extract(html)
