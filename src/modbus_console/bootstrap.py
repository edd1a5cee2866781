from __future__ import annotations

from modbus_console.api import ApiClientConfig, ConsoleApiClient, TokenProvider
from modbus_console.config import Settings, SettingsManager
from modbus_console.services import ModbusService, ServiceRegistry, UserService
from modbus_console.utils import get_logger


logger = get_logger(__name__)


def build_client(
    settings: Settings,
    token_provider: TokenProvider | None = None,
) -> ConsoleApiClient:
    config = ApiClientConfig.from_settings(settings)
    return ConsoleApiClient(config, token_provider=token_provider)


def build_services(
    settings: Settings | None = None,
    token_provider: TokenProvider | None = None,
    *,
    client: ConsoleApiClient | None = None,
) -> ServiceRegistry:
    """Initialise the domain services against one shared API client.

    ``token_provider`` returns the bearer token for each request; acquiring
    and refreshing that token is left to the caller.
    """

    settings = settings or SettingsManager().load()
    if not settings.is_configured:
        logger.warning("API base URL not configured; services unavailable")
        return ServiceRegistry()

    client = client or build_client(settings, token_provider)
    registry = ServiceRegistry(
        users=UserService(client),
        modbus=ModbusService(client),
    )
    logger.info(
        "Domain services initialised",
        api_base_url=client.base_url,
        authenticated=token_provider is not None,
    )
    return registry


__all__ = ["build_client", "build_services"]
