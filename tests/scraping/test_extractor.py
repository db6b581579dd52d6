# ABOUTME: Tests for per-site field extraction and CAPTCHA handling
# ABOUTME: Drives SiteExtractor through its states with an in-memory page and operator

import pytest
from fakes import FakeOperator, FakePage, site_fields

from heritage_scraper.scraping.base import MissingFieldError, NavigationError
from heritage_scraper.scraping.extractor import EXTRACT_SCRIPT, ExtractionState, SiteExtractor

URL = "https://whc.unesco.org/en/list/211"
CAPTCHA_HTML = (
    "<html><body><form><p>This question is for testing whether you are a human visitor "
    "and to prevent automated spam submission.</p></form></body></html>"
)


class TestSiteExtractor:
    """Test extraction of raw site fields."""

    @pytest.mark.asyncio
    async def test_extracts_fields_and_resolves_images(self, config, sleep):
        page = FakePage(sites={URL: site_fields("Minaret of Jam")})
        extractor = SiteExtractor(page, config, FakeOperator(), sleep=sleep)

        fields = await extractor.extract(URL)

        assert fields.title == "Minaret of Jam"
        assert fields.coordinates_text == "N34 23 47.1 E64 30 57.2"
        assert fields.images == ["https://whc.unesco.org/uploads/sites/minaret_of_jam.jpg"]
        assert extractor.state is ExtractionState.EXTRACTED
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_strips_whitespace_from_fields(self, config, sleep):
        raw = site_fields("  Bamiyan Valley \n", description="  Cliffs and caves. Buddhas.  ")
        page = FakePage(sites={URL: raw})

        fields = await SiteExtractor(page, config, FakeOperator(), sleep=sleep).extract(URL)

        assert fields.title == "Bamiyan Valley"
        assert fields.description == "Cliffs and caves. Buddhas."

    @pytest.mark.asyncio
    async def test_hero_policy_keeps_one_image(self, config, sleep):
        raw = site_fields("Jam") | {"images": ["/a.jpg", "/b.jpg"]}
        page = FakePage(sites={URL: raw})

        fields = await SiteExtractor(page, config, FakeOperator(), sleep=sleep).extract(URL)

        assert fields.images == ["https://whc.unesco.org/a.jpg"]

    @pytest.mark.asyncio
    async def test_gallery_policy_caps_and_dedupes_images(self, config, sleep):
        config = config.model_copy(update={"image_policy": "gallery", "max_gallery_images": 3})
        raw = site_fields("Jam") | {"images": ["/a.jpg", "/a.jpg", "/b.jpg", "", "/c.jpg", "/d.jpg"]}
        page = FakePage(sites={URL: raw})

        fields = await SiteExtractor(page, config, FakeOperator(), sleep=sleep).extract(URL)

        assert fields.images == [
            "https://whc.unesco.org/a.jpg",
            "https://whc.unesco.org/b.jpg",
            "https://whc.unesco.org/c.jpg",
        ]

    @pytest.mark.asyncio
    async def test_script_receives_configured_selectors(self, config, sleep):
        captured = {}

        class CapturingPage(FakePage):
            async def evaluate(self, script, arg=None):
                if script == EXTRACT_SCRIPT:
                    captured.update(arg)
                return await super().evaluate(script, arg)

        page = CapturingPage(sites={URL: site_fields("Jam")})
        await SiteExtractor(page, config, FakeOperator(), sleep=sleep).extract(URL)

        assert captured["titles"] == ["h1.title", "#content h1"]
        assert captured["descriptions"][0] == "div#contentdes_en div.rich-text p"
        assert captured["imagePolicy"] == "hero"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("raw", "missing"),
        [
            (site_fields("", description="Has a description."), ["title"]),
            (site_fields("Jam", description="   "), ["description"]),
            ({"coordinates_text": "", "images": []}, ["title", "description"]),
        ],
    )
    async def test_missing_required_fields(self, config, sleep, raw, missing):
        page = FakePage(sites={URL: raw})

        with pytest.raises(MissingFieldError) as exc_info:
            await SiteExtractor(page, config, FakeOperator(), sleep=sleep).extract(URL)

        assert exc_info.value.missing == missing
        assert exc_info.value.url == URL
        assert "<html>" in exc_info.value.html

    @pytest.mark.asyncio
    async def test_navigation_failure_propagates_after_retries(self, config, sleep):
        page = FakePage(sites={URL: site_fields("Jam")}, nav_failures={URL: 3})

        with pytest.raises(NavigationError):
            await SiteExtractor(page, config, FakeOperator(), sleep=sleep).extract(URL)

        assert page.navigations == [URL] * 3
        assert sleep.delays == [2.0, 2.0]


class TestCaptchaPause:
    """Test the operator-gated verification pause."""

    @pytest.mark.asyncio
    async def test_waits_for_operator_then_extracts(self, config, sleep):
        page = FakePage(sites={URL: site_fields("Jam")}, html={URL: [CAPTCHA_HTML, "<html>solved</html>"]})
        states = []
        operator = FakeOperator()
        extractor = SiteExtractor(page, config, operator, sleep=sleep)
        operator.on_resume = lambda: states.append(extractor.state)

        fields = await extractor.extract(URL)

        assert fields.title == "Jam"
        assert len(operator.alerts) == 1
        assert URL in operator.alerts[0]
        assert operator.resumes == 1
        assert states == [ExtractionState.AWAITING_OPERATOR]
        assert sleep.delays == [config.captcha_settle_seconds]

    @pytest.mark.asyncio
    async def test_alerts_again_while_marker_remains(self, config, sleep):
        page = FakePage(
            sites={URL: site_fields("Jam")},
            html={URL: [CAPTCHA_HTML, CAPTCHA_HTML, "<html>solved</html>"]},
        )
        operator = FakeOperator()

        await SiteExtractor(page, config, operator, sleep=sleep).extract(URL)

        assert operator.resumes == 2
        assert sleep.delays == [5.0, 5.0]

    @pytest.mark.asyncio
    async def test_no_pause_without_marker(self, config, sleep):
        page = FakePage(sites={URL: site_fields("Jam")})
        operator = FakeOperator()

        await SiteExtractor(page, config, operator, sleep=sleep).extract(URL)

        assert operator.alerts == []
        assert operator.resumes == 0
