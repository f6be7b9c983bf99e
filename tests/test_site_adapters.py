"""
tests/test_site_adapters.py

Site adapters over canned HTML served by an in-memory relay.

Coverage
--------
- DHC listing, hash pagination, detail pricing (campaign, cross-sell block)
- VT Cosmetics listing price cascade, pagination, detail price swap
- innisfree listing, pagination URL, detail selectors
- crawl_categories page/category delays and failure handling
"""

from __future__ import annotations

import pytest

from app.errors import ListDiscoveryError
from app.proxy.resolver import ProxyDecision
from app.scraping.base import PageFetcher
from app.scraping.parsing import HTMLParsingLayer
from app.scraping.rate_limiter import DomainRateLimiter
from app.scraping.sites import DHCAdapter, InnisfreeAdapter, VTCosmeticsAdapter
from tests.conftest import RecordingSleep, StaticPageRelay, make_site

DHC_CATEGORY = "https://www.dhc.co.jp/goods/cagoods.jsp?cCode=10115000"
VT_CATEGORY = "https://vtcosmetics.jp/category/cica/51/"
INNISFREE_CATEGORY = "https://www.innisfree.jp/ja/product/list?categoryCode=0001"

DHC_LISTING = """
<ul class="display_matrix" id="goods">
  <li><div class="goods_set">
    <div class="img_box"><img data-src="/img/oil.jpg" src="data:image/gif;base64,R0lG"></div>
    <div class="txt_box"><p class="name"><a href="/goods/oil.jsp">DHC  Deep Cleansing Oil</a></p></div>
    <div class="price_box"><p class="price1">¥2,800</p><p class="price2"><strong>¥2,380</strong></p></div>
  </div></li>
  <li><div class="goods_set">
    <div class="txt_box"><p class="name"><a href="/goods/lip.jsp">DHC Lip Cream</a></p></div>
    <div class="price_box"><p class="price2"><strong>¥770</strong></p></div>
  </div></li>
  <li><div class="goods_set">
    <div class="txt_box"><p class="name"><a href="/goods/set.jsp">DHC Trial Set</a></p></div>
  </div></li>
  <li><div class="banner">not a product</div></li>
</ul>
<a class="page-link next" href="#page2">next</a>
"""

DHC_DETAIL_CAMPAIGN = """
<div class="cart_set_box">
  <div class="cart_set">
    <p class="cart_set_title active">通常購入</p>
    <div class="price_box"><p class="price2"><strong>¥3,300</strong></p></div>
    <div class="cart_set">
      <p class="cart_set_title">キャンペーン価格</p>
      <div class="price_box"><p class="price2"><strong>¥2,970</strong></p></div>
    </div>
  </div>
</div>
"""

DHC_DETAIL_FALLBACK = """
<div class="together_box"><div class="price_box"><p class="price2"><strong>¥990</strong></p></div></div>
<div class="spec_price"><p class="price2"><strong>¥1,650</strong></p></div>
"""

VT_LISTING = """
<ul>
  <li>
    <a href="/product/detail.html?product_no=1"><img src="//vtcosmetics.jp/img/1.jpg"><span>CICA Cream</span></a>
    <div class="price">¥3,300</div>
  </li>
  <li>
    <a href="/product/detail.html?product_no=2"><strong>CICA Toner</strong></a>
    <p>2530</p>
  </li>
  <li><a href="/board/notice.html"><span>Notice</span></a></li>
</ul>
<div class="paging"><a href="?page=2">2</a></div>
"""

INNISFREE_LISTING = """
<ul>
  <li class="product-item">
    <a href="/ja/product/detail?prdSeq=1"><img src="/img/1.jpg"><p class="name">Green Tea Serum</p></a>
    <span class="price">¥2,970</span>
  </li>
  <li><a href="/ja/product/detail?prdSeq=2" title="Volcanic Pore Mask"><img src="/img/2.jpg"></a></li>
</ul>
"""


def _fetcher(site, settings, pages: dict[str, str], sleep: RecordingSleep) -> tuple[PageFetcher, StaticPageRelay]:
    relay = StaticPageRelay(pages)
    fetcher = PageFetcher(
        site=site,
        settings=settings,
        relay=relay,
        proxy_decision=ProxyDecision.disabled(),
        rate_limiter=DomainRateLimiter(default_rate_limit_per_second=100.0, sleep=lambda _: None),
        sleep=sleep,
    )
    return fetcher, relay


def _dhc_site(**overrides):
    fields = {
        "source_name": "DHC",
        "base_url": "https://www.dhc.co.jp",
        "category_urls": [DHC_CATEGORY],
        "hosts": ["dhc.co.jp"],
    }
    fields.update(overrides)
    return make_site("dhc", **fields)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


class TestHTMLParsingLayer:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("¥1,980", 1980), ("税込 ¥ 3,300 円", 3300), ("1200円", 1200), ("", None), ("価格未定", None)],
    )
    def test_parse_price(self, text: str, expected: int | None) -> None:
        assert HTMLParsingLayer.parse_price(text) == expected

    def test_bare_price_only_accepts_plausible_amounts(self) -> None:
        assert HTMLParsingLayer.parse_bare_price(" 2530 ") == 2530
        assert HTMLParsingLayer.parse_bare_price("99") is None
        assert HTMLParsingLayer.parse_bare_price("2,530") is None

    def test_absolute_url(self) -> None:
        base = "https://shop.example.com"
        assert HTMLParsingLayer.absolute_url(base, "//cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"
        assert HTMLParsingLayer.absolute_url(base, "/p/1") == "https://shop.example.com/p/1"
        assert HTMLParsingLayer.absolute_url(base, "javascript:void(0)") is None
        assert HTMLParsingLayer.absolute_url(base, "#top") is None


# ---------------------------------------------------------------------------
# DHC
# ---------------------------------------------------------------------------


class TestDHCAdapter:
    def test_listing_refs_carry_listing_prices(self, scraping_settings, sleep) -> None:
        fetcher, relay = _fetcher(_dhc_site(), scraping_settings, {DHC_CATEGORY: DHC_LISTING}, sleep)
        adapter = DHCAdapter(site=fetcher.site, fetcher=fetcher)

        refs = list(adapter.list_products())

        assert [ref.url for ref in refs] == [
            "https://www.dhc.co.jp/goods/oil.jsp",
            "https://www.dhc.co.jp/goods/lip.jsp",
            "https://www.dhc.co.jp/goods/set.jsp",
        ]
        oil = refs[0].listing
        assert oil is not None
        assert (oil.price, oil.sale_price) == (2800, 2380)
        assert oil.image_url == "https://www.dhc.co.jp/img/oil.jpg"
        assert (refs[1].listing.price, refs[1].listing.sale_price) == (770, None)
        assert refs[2].listing.price is None
        # Hash pagination resolves to the same document, so only one request is made.
        assert relay.requested == [DHC_CATEGORY]

    def test_fetch_detail_skips_request_when_listing_has_price(self, scraping_settings, sleep) -> None:
        fetcher, relay = _fetcher(_dhc_site(), scraping_settings, {DHC_CATEGORY: DHC_LISTING}, sleep)
        adapter = DHCAdapter(site=fetcher.site, fetcher=fetcher)
        ref = list(adapter.list_products())[1]

        raw = adapter.fetch_detail(ref)

        assert raw.price == 770
        assert relay.requested == [DHC_CATEGORY]
        assert sleep.calls == []

    def test_fetch_detail_reads_campaign_price(self, scraping_settings, sleep) -> None:
        pages = {DHC_CATEGORY: DHC_LISTING, "https://www.dhc.co.jp/goods/set.jsp": DHC_DETAIL_CAMPAIGN}
        fetcher, _ = _fetcher(_dhc_site(), scraping_settings, pages, sleep)
        adapter = DHCAdapter(site=fetcher.site, fetcher=fetcher)
        ref = list(adapter.list_products())[2]

        raw = adapter.fetch_detail(ref)

        assert raw.name == "DHC Trial Set"
        assert (raw.price, raw.sale_price) == (3300, 2970)
        assert sleep.calls == [scraping_settings.detail_delay_seconds]

    def test_detail_fallback_ignores_cross_sell_block(self) -> None:
        soup = HTMLParsingLayer.soup(DHC_DETAIL_FALLBACK)
        assert DHCAdapter.parse_detail_prices(soup) == (1650, None)


# ---------------------------------------------------------------------------
# VT Cosmetics
# ---------------------------------------------------------------------------


class TestVTCosmeticsAdapter:
    def _adapter(self, scraping_settings, sleep, pages=None):
        site = make_site(
            "vt",
            source_name="VT Cosmetics",
            base_url="https://vtcosmetics.jp",
            category_urls=[VT_CATEGORY],
            hosts=["vtcosmetics.jp"],
        )
        fetcher, relay = _fetcher(site, scraping_settings, pages or {}, sleep)
        return VTCosmeticsAdapter(site=site, fetcher=fetcher), relay

    def test_parse_listing_price_cascade(self, scraping_settings, sleep) -> None:
        adapter, _ = self._adapter(scraping_settings, sleep)

        refs = adapter.parse_listing(HTMLParsingLayer.soup(VT_LISTING), VT_CATEGORY)

        assert [ref.name for ref in refs] == ["CICA Cream", "CICA Toner"]
        assert refs[0].listing.price == 3300
        assert refs[0].listing.image_url == "https://vtcosmetics.jp/img/1.jpg"
        assert refs[1].listing.price == 2530
        assert refs[1].url == "https://vtcosmetics.jp/product/detail.html?product_no=2"

    def test_next_page_uses_page_query(self, scraping_settings, sleep) -> None:
        adapter, _ = self._adapter(scraping_settings, sleep)
        soup = HTMLParsingLayer.soup(VT_LISTING)

        assert adapter.next_page_url(soup, VT_CATEGORY, 1) == f"{VT_CATEGORY}?page=2"
        assert adapter.next_page_url(soup, f"{VT_CATEGORY}?page=2", 2) == f"{VT_CATEGORY}?page=3"
        assert adapter.next_page_url(HTMLParsingLayer.soup("<ul></ul>"), VT_CATEGORY, 1) is None

    def test_listing_pagination_stops_when_page_adds_nothing(self, scraping_settings, sleep) -> None:
        pages = {VT_CATEGORY: VT_LISTING, f"{VT_CATEGORY}?page=2": VT_LISTING}
        adapter, relay = self._adapter(scraping_settings, sleep, pages)

        refs = list(adapter.list_products())

        assert len(refs) == 2
        assert relay.requested == [VT_CATEGORY, f"{VT_CATEGORY}?page=2"]
        assert sleep.calls == [scraping_settings.page_delay_seconds]

    @pytest.mark.parametrize(
        ("html", "expected"),
        [
            (
                '<span id="span_product_price_text">¥3,000</span><span id="span_product_price_sale">¥2,400</span>',
                (3000, 2400),
            ),
            (
                '<span id="span_product_price_text">¥2,400</span><span id="span_product_price_sale">¥3,000</span>',
                (3000, 2400),
            ),
            ("<script>var product_price = '3500'; var product_sale_price = 2800;</script>", (3500, 2800)),
            ('<span id="span_product_price_text">¥1,800</span>', (1800, None)),
        ],
    )
    def test_parse_detail_prices(self, html: str, expected: tuple[int | None, int | None]) -> None:
        assert VTCosmeticsAdapter.parse_detail_prices(HTMLParsingLayer.soup(html)) == expected


# ---------------------------------------------------------------------------
# innisfree
# ---------------------------------------------------------------------------


class TestInnisfreeAdapter:
    def _adapter(self, scraping_settings, sleep, pages=None):
        site = make_site(
            "innisfree",
            source_name="innisfree",
            base_url="https://www.innisfree.jp",
            category_urls=[INNISFREE_CATEGORY],
            hosts=["innisfree.jp", "innisfree.com"],
        )
        fetcher, relay = _fetcher(site, scraping_settings, pages or {}, sleep)
        return InnisfreeAdapter(site=site, fetcher=fetcher), relay

    def test_parse_listing_uses_title_when_name_missing(self, scraping_settings, sleep) -> None:
        adapter, _ = self._adapter(scraping_settings, sleep)

        refs = adapter.parse_listing(HTMLParsingLayer.soup(INNISFREE_LISTING), INNISFREE_CATEGORY)

        assert [ref.name for ref in refs] == ["Green Tea Serum", "Volcanic Pore Mask"]
        assert refs[0].listing.price == 2970
        assert refs[0].url == "https://www.innisfree.jp/ja/product/detail?prdSeq=1"
        assert refs[1].listing.price is None
        assert refs[1].listing.image_url == "https://www.innisfree.jp/img/2.jpg"

    def test_next_page_appends_page_parameter(self, scraping_settings, sleep) -> None:
        adapter, _ = self._adapter(scraping_settings, sleep)
        soup = HTMLParsingLayer.soup('<a href="?categoryCode=0001&page=2">2</a>')

        assert adapter.next_page_url(soup, INNISFREE_CATEGORY, 1) == f"{INNISFREE_CATEGORY}&page=2"
        assert adapter.next_page_url(soup, f"{INNISFREE_CATEGORY}&page=2", 2) == f"{INNISFREE_CATEGORY}&page=3"

    def test_fetch_detail_reads_price_and_sale(self, scraping_settings, sleep) -> None:
        detail_url = "https://www.innisfree.jp/ja/product/detail?prdSeq=2"
        pages = {
            INNISFREE_CATEGORY: INNISFREE_LISTING,
            detail_url: '<div class="product-price">¥1,800</div><div class="sale-price">¥1,500</div>',
        }
        adapter, _ = self._adapter(scraping_settings, sleep, pages)
        ref = list(adapter.list_products())[1]

        raw = adapter.fetch_detail(ref)

        assert (raw.name, raw.price, raw.sale_price) == ("Volcanic Pore Mask", 1800, 1500)


# ---------------------------------------------------------------------------
# Category crawling
# ---------------------------------------------------------------------------


class TestCrawlCategories:
    def test_failed_category_is_skipped_with_delay_between_categories(self, scraping_settings, sleep) -> None:
        missing = "https://www.dhc.co.jp/goods/cagoods.jsp?cCode=99999999"
        site = _dhc_site(category_urls=[missing, DHC_CATEGORY])
        fetcher, _ = _fetcher(site, scraping_settings, {DHC_CATEGORY: DHC_LISTING}, sleep)

        refs = list(DHCAdapter(site=site, fetcher=fetcher).list_products())

        assert len(refs) == 3
        assert sleep.calls == [scraping_settings.category_delay_seconds]
        assert len(fetcher.category_errors) == 1
        assert fetcher.category_errors[0].startswith(f"{missing}: ")

    def test_all_categories_failing_raises(self, scraping_settings, sleep) -> None:
        fetcher, _ = _fetcher(_dhc_site(), scraping_settings, {}, sleep)

        with pytest.raises(ListDiscoveryError):
            list(DHCAdapter(site=fetcher.site, fetcher=fetcher).list_products())

    def test_duplicate_refs_across_categories_are_yielded_once(self, scraping_settings, sleep) -> None:
        second = "https://www.dhc.co.jp/goods/cagoods.jsp?cCode=10118000"
        site = _dhc_site(category_urls=[DHC_CATEGORY, second])
        fetcher, _ = _fetcher(site, scraping_settings, {DHC_CATEGORY: DHC_LISTING, second: DHC_LISTING}, sleep)

        refs = list(DHCAdapter(site=site, fetcher=fetcher).list_products())

        assert len(refs) == 3
