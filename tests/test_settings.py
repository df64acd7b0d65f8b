import pydantic
import pytest

from fare_compare.settings import (
    CaptureSettings,
    DriverLookupSettings,
    EngineSettings,
    PricingSourceSettings,
    Settings,
)


@pytest.mark.unit
class TestEngineSettings:
    def test_defaults(self):
        settings = EngineSettings()

        assert settings.currency == "EGP"
        assert settings.rounding_unit == 5.0
        assert settings.road_distance_factor == 1.20
        assert settings.observed_price_max_age_seconds == 300
        assert settings.default_sort_policy == "lowest_price"
        assert settings.timezone == "Africa/Cairo"

    def test_reads_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("COMPARE_CURRENCY", "SAR")
        monkeypatch.setenv("COMPARE_CAPTURE_TIMEOUT_SECONDS", "0.5")

        settings = EngineSettings()

        assert settings.currency == "SAR"
        assert settings.capture_timeout_seconds == 0.5

    @pytest.mark.parametrize(
        "field,value",
        [
            ("rounding_unit", 0),
            ("road_distance_factor", 0.8),
            ("capture_timeout_seconds", 0),
            ("driver_lookup_timeout_seconds", -1),
            ("timezone", "Mars/Olympus_Mons"),
        ],
    )
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(pydantic.ValidationError):
            EngineSettings(**{field: value})


@pytest.mark.unit
class TestCollaboratorSettings:
    def test_driver_lookup_requires_key_with_url(self):
        with pytest.raises(pydantic.ValidationError, match="DRIVERS_API_KEY"):
            DriverLookupSettings(base_url="https://db.example.com")

    def test_driver_lookup_strips_trailing_slash(self):
        settings = DriverLookupSettings(base_url="https://db.example.com/", api_key="k")
        assert settings.base_url == "https://db.example.com"

    @pytest.mark.parametrize(
        "settings_class,kwargs",
        [
            (DriverLookupSettings, {"base_url": "ftp://example.com", "api_key": "k"}),
            (CaptureSettings, {"bridge_url": "ftp://example.com"}),
            (PricingSourceSettings, {"config_url": "ftp://example.com"}),
        ],
    )
    def test_rejects_non_http_urls(self, settings_class, kwargs):
        with pytest.raises(pydantic.ValidationError, match="must start with http"):
            settings_class(**kwargs)


@pytest.mark.unit
def test_nested_settings_from_env(monkeypatch):
    monkeypatch.setenv("API_KEY", "abc")
    monkeypatch.setenv("CAPTURE_BRIDGE_URL", "http://bridge.local")

    settings = Settings()

    assert settings.api.key == "abc"
    assert settings.capture.bridge_url == "http://bridge.local"
    assert settings.drivers.base_url == ""
