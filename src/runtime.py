"""
Process-level wiring of the allocator and its collaborators.

Clients are opened once at startup and closed at shutdown; nothing is
held in module-level connection globals.

Usage:
    async with AllocatorRuntime.from_config(settings, store=store) as runtime:
        status = await runtime.allocator.allocate_professional(booking)
"""

import logging
from typing import Any, Optional

from src.allocation.orchestrator import ProfessionalAllocator
from src.clients.booking_store import InMemoryBookingStore
from src.clients.directory import HttpProfessionalDirectory, InMemoryProfessionalDirectory
from src.clients.email_transport import (
    BrevoEmailTransport,
    EmailTransport,
    LoggingEmailTransport,
)
from src.clients.notifier import EmailNotifier
from src.clients.outbox import NotificationOutbox
from src.config import AppConfig

logger = logging.getLogger(__name__)


class AllocatorRuntime:
    """Owns the lifecycle of directory, store and notification outbox."""

    def __init__(
        self,
        config: AppConfig,
        directory: Any,
        store: Any,
        transport: EmailTransport,
    ) -> None:
        self.config = config
        self.directory = directory
        self.store = store
        self.outbox = NotificationOutbox(transport, config.notifications.outbox_max_size)
        self.notifier = EmailNotifier(
            self.outbox,
            sender_email=config.notifications.sender_email,
            sender_name=config.notifications.sender_name,
            timezone_name=config.notifications.display_timezone,
        )
        self.allocator = ProfessionalAllocator(
            directory, store, self.notifier, config.allocation
        )

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        store: Optional[Any] = None,
        directory: Optional[Any] = None,
        transport: Optional[EmailTransport] = None,
    ) -> "AllocatorRuntime":
        """Build collaborators from configuration, unless explicitly supplied."""
        if directory is None:
            if config.directory.api_base:
                directory = HttpProfessionalDirectory(
                    config.directory.api_base, config.directory.timeout_sec
                )
            else:
                logger.warning("DIRECTORY_API_BASE not set; using an empty in-memory directory")
                directory = InMemoryProfessionalDirectory()
        if transport is None:
            notifications = config.notifications
            if notifications.brevo_api_key:
                transport = BrevoEmailTransport(
                    notifications.brevo_api_key,
                    notifications.brevo_api_url,
                    notifications.send_timeout_sec,
                )
            else:
                logger.warning("BREVO_API_KEY not set; emails will only be logged")
                transport = LoggingEmailTransport()
        return cls(config, directory, store or InMemoryBookingStore(), transport)

    async def start(self) -> None:
        await self.store.start()
        await self.directory.start()
        await self.outbox.start()
        logger.info("Allocator runtime started for '%s'", self.config.service_name)

    async def close(self) -> None:
        await self.outbox.close()
        await self.directory.close()
        await self.store.close()
        logger.info("Allocator runtime stopped")

    async def __aenter__(self) -> "AllocatorRuntime":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
