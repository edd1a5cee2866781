from __future__ import annotations

from modbus_console.ui.i18n import DEFAULT_CATALOG, MessageCatalog


def test_translate_formats_parameters() -> None:
    message = DEFAULT_CATALOG.translate("users.errors.password_too_short", minimum=6)

    assert message == "The password must be at least 6 characters."


def test_locale_messages_fall_back_to_defaults() -> None:
    catalog = MessageCatalog(
        locale="fa",
        messages={"users.errors.assign_roles_failed": "به‌روزرسانی نقش‌ها ناموفق بود"},
    )

    assert catalog("users.errors.assign_roles_failed") == "به‌روزرسانی نقش‌ها ناموفق بود"
    assert catalog("users.errors.delete_failed") == "Failed to delete the user."


def test_unknown_key_renders_as_key() -> None:
    assert DEFAULT_CATALOG.translate("missing.key") == "missing.key"


def test_missing_parameter_returns_template() -> None:
    template = DEFAULT_CATALOG.translate("modbus.errors.mapping_overlap")

    assert template == "{detail}"
