"""Message lookup for dialog and page text."""

from .catalog import DEFAULT_CATALOG, DEFAULT_MESSAGES, MessageCatalog, Translator

__all__ = ["DEFAULT_CATALOG", "DEFAULT_MESSAGES", "MessageCatalog", "Translator"]
