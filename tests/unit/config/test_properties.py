"""Unit tests for the process-wide property table."""

import pytest

from jarforge.config import properties
from jarforge.config.properties import get_property, override_properties, set_property, system_properties


@pytest.fixture(autouse=True)
def isolated_table(monkeypatch):
    monkeypatch.setattr(properties, "_properties", {})


class TestOverrideProperties:
    def test_overlay_visible_inside_block(self):
        with override_properties({"quarkus.profile": "dev"}) as snapshot:
            assert get_property("quarkus.profile") == "dev"
            assert snapshot["quarkus.profile"] == "dev"
        assert get_property("quarkus.profile") is None

    def test_restores_previous_value(self):
        set_property("app.mode", "prod")

        with override_properties({"app.mode": "test"}):
            assert get_property("app.mode") == "test"

        assert get_property("app.mode") == "prod"
        assert system_properties() == {"app.mode": "prod"}

    def test_restores_on_exception(self):
        before = system_properties()
        with pytest.raises(RuntimeError):
            with override_properties({"leaky": "yes"}):
                raise RuntimeError("hook failed")
        assert system_properties() == before
        assert get_property("leaky") is None

    def test_environment_fallback(self, monkeypatch):
        monkeypatch.setenv("JARFORGE_PROP_SOME_KEY", "from-env")
        assert get_property("some.key") == "from-env"
        assert get_property("other.key", "default") == "default"
