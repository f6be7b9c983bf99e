"""
VT Cosmetics official store adapter.
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

PRODUCT_LINK_SELECTOR = "a[href*='/product/detail.html']"
LISTING_PRICE_SELECTORS = [
    ".price",
    ".item_price",
    ".product_price",
    ".prd_price",
    '[class*="price"]',
    '[class*="Price"]',
]
PAGE_LINK_SELECTOR = "a[href*='page=']"

DETAIL_PRICE_SELECTOR = "#span_product_price_text"
DETAIL_SALE_PRICE_SELECTOR = "#span_product_price_sale"
SCRIPT_PRICE_REGEX = re.compile(r"product_price\s*=\s*['\"]?(\d+)['\"]?")
SCRIPT_SALE_PRICE_REGEX = re.compile(r"product_sale_price\s*=\s*(\d+)")


class VTCosmeticsAdapter:
    """
    Listing prices are used when present; otherwise the detail page is read.
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
            name=ref.name or HTMLParsingLayer.first_text(soup, ["h2", "h1", "title"]),
            product_url=ref.url,
            price=price,
            sale_price=sale_price,
        )

    def parse_listing(self, soup: BeautifulSoup, page_url: str) -> list[ProductRef]:
        refs: list[ProductRef] = []
        seen: set[str] = set()
        for item in soup.select("li"):
            link = item.select_one(PRODUCT_LINK_SELECTOR)
            if link is None:
                continue

            name = HTMLParsingLayer.text_of(link.find("span")) or HTMLParsingLayer.text_of(link.find("strong"))
            if not name:
                continue
            product_url = HTMLParsingLayer.absolute_url(self.site.base_url, link.get("href"))
            if not product_url or product_url in seen:
                continue
            seen.add(product_url)

            listing = RawProduct(
                name=name,
                product_url=product_url,
                price=self._listing_price(item),
                image_url=HTMLParsingLayer.absolute_url(self.site.base_url, self._image_src(item)),
            )
            refs.append(ProductRef(url=product_url, name=name, listing=listing))
        return refs

    def next_page_url(self, soup: BeautifulSoup, current_url: str, page_number: int) -> str | None:
        if soup.select_one(PAGE_LINK_SELECTOR) is None:
            return None
        category_url = urldefrag(current_url)[0].split("?", 1)[0]
        return f"{category_url}?page={page_number + 1}"

    @staticmethod
    def _listing_price(item: Tag) -> int | None:
        for node in item.find_all(["span", "strong", "div"]):
            text = HTMLParsingLayer.text_of(node)
            if "¥" in text:
                price = HTMLParsingLayer.parse_price(text)
                if price:
                    return price

        for selector in LISTING_PRICE_SELECTORS:
            node = item.select_one(selector)
            if node is not None:
                price = HTMLParsingLayer.parse_price(HTMLParsingLayer.text_of(node))
                if price:
                    return price

        for node in item.find_all(True):
            price = HTMLParsingLayer.parse_bare_price(HTMLParsingLayer.text_of(node))
            if price:
                return price
        return None

    @staticmethod
    def _image_src(item: Tag) -> str | None:
        image = item.find("img")
        if image is None:
            return None
        src = image.get("src")
        return src if isinstance(src, str) else None

    @staticmethod
    def parse_detail_prices(soup: BeautifulSoup) -> tuple[int | None, int | None]:
        """
        Return `(price, sale_price)`; a sale price only survives when it is
        lower than the regular price.
        """

        price = HTMLParsingLayer.parse_price(HTMLParsingLayer.text_of(soup.select_one(DETAIL_PRICE_SELECTOR)))
        sale_price = HTMLParsingLayer.parse_price(
            HTMLParsingLayer.text_of(soup.select_one(DETAIL_SALE_PRICE_SELECTOR))
        )

        if not price or not sale_price:
            script_text = "\n".join(script.get_text() for script in soup.find_all("script"))
            price_match = SCRIPT_PRICE_REGEX.search(script_text)
            if price_match and not price:
                price = int(price_match.group(1))
            sale_match = SCRIPT_SALE_PRICE_REGEX.search(script_text)
            if sale_match and not sale_price:
                sale_price = int(sale_match.group(1))

        if sale_price and price and sale_price < price:
            return price, sale_price
        if sale_price:
            # The site sometimes swaps the two fields.
            return sale_price, price
        return price, None
