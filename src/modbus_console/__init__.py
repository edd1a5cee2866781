from __future__ import annotations

import asyncio
import os

from modbus_console.bootstrap import build_services
from modbus_console.config import ENV_PREFIX, SettingsManager
from modbus_console.services import ServiceRegistry
from modbus_console.utils import LoggingOptions, configure_logging, get_logger


def main() -> None:
    settings = SettingsManager().load()
    log_path = configure_logging(LoggingOptions.from_settings(settings))
    logger = get_logger(__name__)
    logger.info(
        "Starting Modbus console",
        api_base_url=settings.api_base_url,
        log_path=str(log_path) if log_path else None,
    )

    token = os.getenv(f"{ENV_PREFIX}API_TOKEN")
    services = build_services(settings, (lambda: token) if token else None)
    try:
        asyncio.run(_summarise(services))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


async def _summarise(services: ServiceRegistry) -> None:
    logger = get_logger(__name__)
    if services.users is not None:
        users = await services.users.list_users()
        roles = await services.users.list_roles()
        logger.info("Users loaded", users=len(users), roles=len(roles))
    if services.modbus is not None:
        controllers = await services.modbus.list_controllers()
        gateways = await services.modbus.list_gateways()
        logger.info(
            "Modbus inventory loaded",
            controllers=len(controllers),
            gateways=len(gateways),
        )


__all__ = ["main"]
