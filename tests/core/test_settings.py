"""Tests for the Settings configuration manager."""

import json
import os
import tempfile

import pytest

from docgroup.core.registry.group import GroupOptions
from docgroup.core.exceptions import InvalidArgument
from docgroup.core.settings.settings import Settings, as_bool


class TestSettingsBasics:
    """Construction and defaults."""

    def test_initialization(self):
        settings = Settings()
        assert not settings.is_loaded
        assert settings.config_path is None

    def test_defaults(self):
        settings = Settings()
        assert settings.get_core_config() == {
            "use_transactions": False,
            "return_document_state": False,
            "allow_override": True,
        }
        assert settings.is_loaded
        assert settings.get_group_config("customers") == {}


class TestSettingsSources:
    """Dict, JSON file and environment variables."""

    def test_config_dict_merges_over_defaults(self):
        settings = Settings()
        settings.load({"docgroup": {"use_transactions": True}})
        assert settings.get_core_config("use_transactions") is True
        assert settings.get_core_config("allow_override") is True

    def test_json_file_overrides_dict(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump({"groups": {"orders": {"use_transactions": False}}}, f)
            config_path = f.name

        try:
            settings = Settings(config_path=config_path)
            settings.load({"groups": {"orders": {"use_transactions": True, "return_document_state": True}}})
            assert settings.get_group_config("orders") == {
                "use_transactions": False,
                "return_document_state": True,
            }
        finally:
            os.unlink(config_path)

    def test_group_names_are_case_insensitive(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump({"groups": {"Customers": {"return_document_state": True}}}, f)
            config_path = f.name

        try:
            settings = Settings(config_path=config_path)
            settings.load({"groups": {"AuditLog": {"use_transactions": True}}})
        finally:
            os.unlink(config_path)

        assert settings.get_group_config("Customers", "return_document_state") is True
        assert settings.get_group_config("CUSTOMERS", "return_document_state") is True
        assert settings.get_group_config("auditlog") == {"use_transactions": True}
        assert GroupOptions.from_settings(settings, "Customers") == GroupOptions(
            return_document_state=True
        )

    def test_missing_file_is_tolerated(self):
        settings = Settings(config_path="/nonexistent/docgroup.json")
        settings.load()
        assert settings.get_core_config("use_transactions") is False

    def test_invalid_json(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            f.write("{ invalid json }")
            config_path = f.name

        try:
            with pytest.raises(ValueError, match="Invalid JSON"):
                Settings(config_path=config_path).load()
        finally:
            os.unlink(config_path)

    def test_invalid_section_type(self):
        with pytest.raises(ValueError, match="'groups' section must be an object"):
            Settings().load({"groups": []})

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DOCGROUP__DOCGROUP__RETURN_DOCUMENT_STATE", "true")
        monkeypatch.setenv("DOCGROUP__GROUPS__ORDERS__USE_TRANSACTIONS", "true")
        monkeypatch.setenv("DOCGROUP__GROUPS__ORDERS__LABEL", "primary orders")
        monkeypatch.setenv("DOCGROUP__UNKNOWN__KEY", "1")

        settings = Settings()
        settings.load({"docgroup": {"return_document_state": False}})

        assert settings.get_core_config("return_document_state") is True
        assert settings.get_group_config("orders", "use_transactions") is True
        assert settings.get_group_config("orders", "label") == "primary orders"
        assert "unknown" not in settings.get_all_config()


class TestSettingsRuntime:
    """Runtime setters and reload."""

    def test_setters(self):
        settings = Settings()
        settings.set_core_config("use_transactions", True)
        settings.set_group_config("Orders", "return_document_state", True)

        assert settings.get_core_config("use_transactions") is True
        assert settings.get_group_config("orders", "return_document_state") is True

    def test_reload_discards_runtime_changes(self):
        settings = Settings()
        settings.set_core_config("use_transactions", True)
        settings.reload()
        assert settings.get_core_config("use_transactions") is False


def test_group_options_from_settings():
    settings = Settings()
    settings.load(
        {
            "docgroup": {"use_transactions": True, "return_document_state": True},
            "groups": {"audit": {"return_document_state": False}},
        }
    )

    assert GroupOptions.from_settings(settings, "audit") == GroupOptions(
        use_transactions=True, return_document_state=False
    )
    assert GroupOptions.from_settings(settings, "other") == GroupOptions(True, True)


def test_group_options_parse_string_booleans(monkeypatch):
    monkeypatch.setenv("DOCGROUP__DOCGROUP__USE_TRANSACTIONS", "False")
    monkeypatch.setenv("DOCGROUP__GROUPS__ORDERS__RETURN_DOCUMENT_STATE", "Yes")

    settings = Settings()
    settings.load({"docgroup": {"use_transactions": True}})

    assert settings.get_core_config("use_transactions") == "False"
    assert GroupOptions.from_settings(settings, "orders") == GroupOptions(
        use_transactions=False, return_document_state=True
    )


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), (False, False), (1, True), (0, False), ("TRUE", True), (" off ", False), ("", False)],
)
def test_as_bool(value, expected):
    assert as_bool(value, "flag") is expected


@pytest.mark.parametrize("value", ["maybe", 2, None, [True]])
def test_as_bool_rejects_non_booleans(value):
    with pytest.raises(InvalidArgument, match="'flag' must be a boolean"):
        as_bool(value, "flag")
