"""
innisfree official store adapter.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import replace
from urllib.parse import urldefrag

from bs4 import BeautifulSoup, Tag

from app.domain.product import ProductRef, RawProduct
from app.scraping.base import PageFetcher, crawl_categories
from app.scraping.config.models import SiteDefinition
from app.scraping.parsing import HTMLParsingLayer

LIST_ITEM_SELECTOR = "li, .item, .product-item"
PRODUCT_LINK_SELECTOR = "a[href*='/product/']"
NAME_SELECTORS = [".name", ".title", "h3", "h4"]
LISTING_PRICE_SELECTOR = '.price, .cost, [class*="price"]'
PAGE_LINK_SELECTOR = "a[href*='page=']"

DETAIL_PRICE_SELECTORS = [
    ".price",
    ".cost",
    ".regular-price",
    '[class*="price"]',
    "#price",
    ".product-price",
    ".prd-price",
]
DETAIL_SALE_PRICE_SELECTORS = [
    ".sale-price",
    ".special-price",
    '[class*="sale"]',
    ".discount-price",
    ".prd-sale-price",
]
_DIGIT_REGEX = re.compile(r"\d")


class InnisfreeAdapter:
    """
    Listing pages paginate with `&page=N`.
    """

    def __init__(self, *, site: SiteDefinition, fetcher: PageFetcher) -> None:
        self.site = site
        self._fetcher = fetcher

    def list_products(self) -> Iterator[ProductRef]:
        return crawl_categories(
            self._fetcher,
            parse_listing=self.parse_listing,
            next_page_url=self.next_page_url,
        )

    def fetch_detail(self, ref: ProductRef) -> RawProduct:
        listing = ref.listing
        if listing is not None and listing.price:
            return listing

        soup = self._fetcher.get_soup(ref.url)
        price, sale_price = self.parse_detail_prices(soup)
        self._fetcher.pause(self._fetcher.settings.detail_delay_seconds)

        if listing is not None:
            return replace(listing, price=price, sale_price=sale_price)
        return RawProduct(
            name=ref.name or HTMLParsingLayer.first_text(soup, ["h1", "title"]),
            product_url=ref.url,
            price=price,
            sale_price=sale_price,
        )

    def parse_listing(self, soup: BeautifulSoup, page_url: str) -> list[ProductRef]:
        refs: list[ProductRef] = []
        seen: set[str] = set()
        for item in soup.select(LIST_ITEM_SELECTOR):
            link = item.select_one(PRODUCT_LINK_SELECTOR)
            if link is None:
                continue

            name = HTMLParsingLayer.first_text(link, NAME_SELECTORS)
            if not name:
                title = link.get("title")
                name = HTMLParsingLayer.clean_text(title) if isinstance(title, str) else ""
            if not name:
                continue
            product_url = HTMLParsingLayer.absolute_url(self.site.base_url, link.get("href"))
            if not product_url or product_url in seen:
                continue
            seen.add(product_url)

            image = item.find("img")
            listing = RawProduct(
                name=name,
                product_url=product_url,
                price=self._listing_price(item),
                image_url=HTMLParsingLayer.absolute_url(
                    self.site.base_url,
                    image.get("src") if image is not None else None,
                ),
            )
            refs.append(ProductRef(url=product_url, name=name, listing=listing))
        return refs

    def next_page_url(self, soup: BeautifulSoup, current_url: str, page_number: int) -> str | None:
        if soup.select_one(PAGE_LINK_SELECTOR) is None:
            return None
        category_url = re.sub(r"[?&]page=\d+", "", urldefrag(current_url)[0])
        separator = "&" if "?" in category_url else "?"
        return f"{category_url}{separator}page={page_number + 1}"

    @staticmethod
    def _listing_price(item: Tag) -> int | None:
        for node in item.select(LISTING_PRICE_SELECTOR):
            text = HTMLParsingLayer.text_of(node)
            if "¥" in text or _DIGIT_REGEX.search(text):
                price = HTMLParsingLayer.parse_price(text)
                if price:
                    return price
        return None

    @staticmethod
    def parse_detail_prices(soup: BeautifulSoup) -> tuple[int | None, int | None]:
        price = HTMLParsingLayer.first_price(soup, DETAIL_PRICE_SELECTORS)
        sale_price = HTMLParsingLayer.first_price(soup, DETAIL_SALE_PRICE_SELECTORS)
        return price, sale_price

