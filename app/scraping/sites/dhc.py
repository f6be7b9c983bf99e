"""
DHC official store adapter.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import replace
from urllib.parse import urldefrag

from bs4 import BeautifulSoup, Tag

from app.domain.product import ProductRef, RawProduct
from app.scraping.base import PageFetcher, crawl_categories
from app.scraping.config.models import SiteDefinition
from app.scraping.parsing import HTMLParsingLayer

LIST_ITEM_SELECTOR = "ul.display_matrix#goods li"
GOODS_SET_SELECTOR = ".goods_set"
NAME_SELECTOR = ".txt_box .name a"
SALE_PRICE_SELECTOR = ".price_box .price2 strong"
REGULAR_PRICE_SELECTOR = ".price_box .price1"
IMAGE_SELECTOR = ".img_box img"
NEXT_PAGE_SELECTOR = "a.page-link.next"

REGULAR_PURCHASE_LABEL = "通常購入"
CAMPAIGN_LABEL = "キャンペーン価格"
DETAIL_FALLBACK_SELECTORS = [
    ".price_box .price2 strong",
    ".spec_price .price2 strong",
    '[class*="price"]',
]


class DHCAdapter:
    """
    Category listings carry prices; the detail page is only read when they don't.
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
            image_url=self._detail_image(soup),
        )

    def parse_listing(self, soup: BeautifulSoup, page_url: str) -> list[ProductRef]:
        refs: list[ProductRef] = []
        for item in soup.select(LIST_ITEM_SELECTOR):
            goods_set = item.select_one(GOODS_SET_SELECTOR)
            if goods_set is None:
                continue

            name_link = goods_set.select_one(NAME_SELECTOR)
            name = HTMLParsingLayer.text_of(name_link)
            if not name or name_link is None:
                continue
            product_url = HTMLParsingLayer.absolute_url(self.site.base_url, name_link.get("href"))
            if not product_url:
                continue

            price = HTMLParsingLayer.parse_price(
                HTMLParsingLayer.text_of(goods_set.select_one(SALE_PRICE_SELECTOR))
            )
            sale_price = None
            regular_price = HTMLParsingLayer.parse_price(
                HTMLParsingLayer.text_of(goods_set.select_one(REGULAR_PRICE_SELECTOR))
            )
            if regular_price and price:
                sale_price = price
                price = regular_price

            listing = RawProduct(
                name=name,
                product_url=product_url,
                price=price,
                sale_price=sale_price,
                image_url=HTMLParsingLayer.image_src(
                    self.site.base_url,
                    goods_set.select_one(IMAGE_SELECTOR),
                ),
            )
            refs.append(ProductRef(url=product_url, name=name, listing=listing))
        return refs

    def next_page_url(self, soup: BeautifulSoup, current_url: str, page_number: int) -> str | None:
        link = soup.select_one(NEXT_PAGE_SELECTOR)
        if link is None:
            return None
        href = link.get("href")
        if not isinstance(href, str) or not href.strip():
            return None
        href = href.strip()
        if href.startswith("#"):
            return f"{urldefrag(current_url)[0]}{href}"
        return HTMLParsingLayer.absolute_url(self.site.base_url, href)

    @classmethod
    def parse_detail_prices(cls, soup: BeautifulSoup) -> tuple[int | None, int | None]:
        """
        Read the regular-purchase price and an optional campaign price.

        Falls back to generic price selectors, ignoring the cross-sell block.
        """

        price: int | None = None
        sale_price: int | None = None

        for cart_box in soup.select(".cart_set_box"):
            regular_section = cls._section_for(cart_box, ".cart_set_title.active", REGULAR_PURCHASE_LABEL)
            if regular_section is None:
                continue
            price = HTMLParsingLayer.parse_price(
                HTMLParsingLayer.text_of(regular_section.select_one(SALE_PRICE_SELECTOR))
            )
            campaign_section = cls._section_for(regular_section, ".cart_set_title", CAMPAIGN_LABEL)
            if campaign_section is not None:
                sale_price = HTMLParsingLayer.parse_price(
                    HTMLParsingLayer.text_of(campaign_section.select_one(SALE_PRICE_SELECTOR))
                )
            break

        if not price:
            for selector in DETAIL_FALLBACK_SELECTORS:
                candidates = [
                    node for node in soup.select(selector) if node.find_parent(class_="together_box") is None
                ]
                if candidates:
                    price = HTMLParsingLayer.parse_price(HTMLParsingLayer.text_of(candidates[0]))
                    break

        return price, sale_price

    @staticmethod
    def _section_for(root: Tag, title_selector: str, label: str) -> Tag | None:
        for title in root.select(title_selector):
            if label in title.get_text():
                return title.parent
        return None

    def _detail_image(self, soup: BeautifulSoup) -> str | None:
        meta = soup.select_one('meta[property="og:image"]')
        if meta is not None and isinstance(meta.get("content"), str):
            return HTMLParsingLayer.absolute_url(self.site.base_url, meta.get("content"))
        return None
