# ABOUTME: Tests for coordinate normalization from site page text
# ABOUTME: Covers DMS compass notation, "Lat/Long" text and malformed input

import math

import pytest

from heritage_scraper.scraping.coordinates import dms_to_decimal, parse_coordinates


class TestDmsToDecimal:
    """Test degree-minute-second conversion."""

    def test_northern_eastern_hemisphere(self):
        latitude, longitude = dms_to_decimal("N34 23 47.1 E64 30 57.2")

        assert latitude == pytest.approx(34.3964, abs=1e-3)
        assert longitude == pytest.approx(64.5159, abs=1e-3)

    def test_southern_western_hemisphere_is_negative(self):
        assert dms_to_decimal("S10 0 0 W20 0 0") == (-10.0, -20.0)

    def test_lowercase_hemisphere_letters(self):
        latitude, longitude = dms_to_decimal("s33 51 35.9 e151 12 40")

        assert latitude == pytest.approx(-33.8600, abs=1e-3)
        assert longitude == pytest.approx(151.2111, abs=1e-3)

    @pytest.mark.parametrize(
        "text",
        [
            "",
            None,
            "   ",
            "N34 23 47.1",
            "N34 23 47.1 E64 30 57.2 extra",
            "34 23 47.1 64 30 57.2",
            "E34 23 47.1 N64 30 57.2",
            "Nxx 23 47.1 E64 30 57.2",
            "N34 aa 47.1 E64 30 57.2",
        ],
    )
    def test_malformed_input_yields_nan_without_raising(self, text):
        latitude, longitude = dms_to_decimal(text)

        assert math.isnan(latitude)
        assert math.isnan(longitude)

    def test_zero_coordinates_are_not_nan(self):
        coordinates = parse_coordinates("N0 0 0 E0 0 0")

        assert coordinates == (0.0, 0.0)
        assert coordinates.is_known


class TestParseCoordinates:
    """Test the combined parser."""

    def test_lat_long_text(self):
        coordinates = parse_coordinates("Site location - Lat: 27.1751, Long: 78.0421")

        assert coordinates.latitude == pytest.approx(27.1751)
        assert coordinates.longitude == pytest.approx(78.0421)

    def test_lat_long_text_is_case_insensitive_and_signed(self):
        coordinates = parse_coordinates("LAT: -13.1631, LONG: -72.5450")

        assert coordinates == (-13.1631, -72.545)

    def test_falls_back_to_dms(self):
        coordinates = parse_coordinates("N34 23 47.1 E64 30 57.2")

        assert coordinates.latitude == pytest.approx(34.3964, abs=1e-3)

    def test_unparsable_text_is_unknown(self):
        coordinates = parse_coordinates("Coordinates unavailable")

        assert not coordinates.is_known
