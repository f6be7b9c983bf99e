"""
BeautifulSoup helpers shared by the site adapters.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

PRICE_REGEX = re.compile(r"¥?\s*([0-9][0-9,]*)")
BARE_PRICE_REGEX = re.compile(r"^\s*([0-9]{2,5})\s*$")
BARE_PRICE_RANGE = (100, 50_000)


class HTMLParsingLayer:
    """
    Deterministic parser utilities for product HTML documents.
    """

    @staticmethod
    def soup(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    @staticmethod
    def parse_price(value: str | None) -> int | None:
        """
        Parse the first yen amount in `value` ("¥1,980" -> 1980).
        """

        if not value:
            return None
        match = PRICE_REGEX.search(value)
        if match is None:
            return None
        digits = match.group(1).replace(",", "")
        return int(digits) if digits else None

    @staticmethod
    def parse_bare_price(value: str | None) -> int | None:
        if not value:
            return None
        match = BARE_PRICE_REGEX.match(value)
        if match is None:
            return None
        amount = int(match.group(1))
        low, high = BARE_PRICE_RANGE
        return amount if low <= amount <= high else None

    @staticmethod
    def clean_text(value: str | None) -> str:
        if not value:
            return ""
        return re.sub(r"\s+", " ", value).strip()

    @classmethod
    def text_of(cls, node: Tag | None) -> str:
        if node is None:
            return ""
        return cls.clean_text(node.get_text(" ", strip=True))

    @classmethod
    def first_text(cls, root: Tag, selectors: list[str]) -> str:
        """
        Text of the first selector (in order) that yields non-empty text.
        """

        for selector in selectors:
            for node in root.select(selector):
                text = cls.text_of(node)
                if text:
                    return text
        return ""

    @classmethod
    def first_price(cls, root: Tag, selectors: list[str]) -> int | None:
        """
        Price from the first match of each selector, tried in order.
        """

        for selector in selectors:
            price = cls.parse_price(cls.text_of(root.select_one(selector)))
            if price:
                return price
        return None

    @staticmethod
    def absolute_url(base_url: str, href: str | None) -> str | None:
        """
        Resolve protocol-relative and site-relative links against `base_url`.
        """

        if not href:
            return None
        value = href.strip()
        if not value or value.startswith(("javascript:", "#")):
            return None
        if value.startswith("//"):
            return f"https:{value}"
        if value.startswith(("http://", "https://")):
            return value
        return urljoin(f"{base_url.rstrip('/')}/", value)

    @classmethod
    def image_src(cls, base_url: str, node: Tag | None) -> str | None:
        """
        Image URL from lazy-load attributes first, then `src`.
        """

        if node is None:
            return None
        for attribute in ("data-src", "data-original", "src"):
            value = node.get(attribute)
            if isinstance(value, str) and value.strip() and not value.startswith("data:"):
                return cls.absolute_url(base_url, value)
        return None
