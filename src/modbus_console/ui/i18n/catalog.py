from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping

from modbus_console.utils import get_logger


logger = get_logger(__name__)


Translator = Callable[..., str]


DEFAULT_MESSAGES: dict[str, str] = {
    "common.errors.operation_failed": "The operation failed. Please try again.",
    "common.errors.validation_failed": "Please correct the highlighted values: {detail}",
    "common.errors.no_target": "No record is selected.",
    "users.errors.assign_roles_failed": "Failed to update user roles.",
    "users.errors.no_roles_available": "No roles are available to assign.",
    "users.errors.create_failed": "Failed to create the user.",
    "users.errors.edit_failed": "Failed to update the user.",
    "users.errors.delete_failed": "Failed to delete the user.",
    "users.errors.reset_password_failed": "Failed to set the new password.",
    "users.errors.password_too_short": "The password must be at least {minimum} characters.",
    "users.errors.toggle_status_failed": "Failed to change the user status.",
    "modbus.errors.save_controller_failed": "Failed to save the Modbus controller.",
    "modbus.errors.delete_controller_failed": "Failed to delete the Modbus controller.",
    "modbus.errors.save_mappings_failed": "Failed to save gateway mappings.",
    "modbus.errors.mapping_overlap": "{detail}",
    "modbus.errors.duplicate_item": "Monitoring item {item_id} is already mapped on this gateway.",
}


@dataclass(slots=True)
class MessageCatalog:
    """Key based string table with ``str.format`` parameters.

    Unknown keys render as the key itself so a missing translation never
    hides an error from the operator.
    """

    locale: str = "en"
    messages: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_MESSAGES))
    fallback: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_MESSAGES))

    def translate(self, key: str, **params: object) -> str:
        template = self.messages.get(key) or self.fallback.get(key)
        if template is None:
            logger.debug("Missing translation", key=key, locale=self.locale)
            return key
        try:
            return template.format(**params)
        except (KeyError, IndexError):
            logger.warning("Translation parameters missing", key=key, locale=self.locale)
            return template

    __call__ = translate


DEFAULT_CATALOG = MessageCatalog()


__all__ = ["DEFAULT_CATALOG", "DEFAULT_MESSAGES", "MessageCatalog", "Translator"]
