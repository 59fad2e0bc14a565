from __future__ import annotations

from cycle_notify.config import DEFAULT_DETAILS_URL, DEFAULT_FROM_EMAIL, DEFAULT_ITEMS_TABLE, Settings


def test_from_env_treats_blank_values_as_missing():
    settings = Settings.from_env({"SUPABASE_URL": "  ", "RESEND_API_KEY": "re-key "})
    assert settings.supabase_url is None
    assert settings.supabase_service_key is None
    assert settings.resend_api_key == "re-key"


def test_from_env_applies_defaults():
    settings = Settings.from_env({})
    assert settings.from_email == DEFAULT_FROM_EMAIL
    assert settings.details_url == DEFAULT_DETAILS_URL
    assert settings.items_table == DEFAULT_ITEMS_TABLE


def test_from_env_overrides():
    settings = Settings.from_env(
        {
            "SUPABASE_URL": "https://project.supabase.co",
            "SUPABASE_SERVICE_KEY": "service-key",
            "FROM_EMAIL": "alerts@example.com",
            "FROM_NAME": "Alerts",
            "CYCLE_ITEMS_TABLE": "items",
        }
    )
    assert settings.supabase_url == "https://project.supabase.co"
    assert settings.from_email == "alerts@example.com"
    assert settings.from_name == "Alerts"
    assert settings.items_table == "items"
