"""
Process-wide wiring of the notification pipeline.

Created once at application start-up and injected wherever it is needed;
nothing in the pipeline is a module-level global.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.config import Settings
from catalog.kernel.events.event_bus import EventBus
from catalog.notifications.delivery import DeliveryChannel
from catalog.notifications.materializer import NotificationMaterializer
from catalog.notifications.registry import SessionRegistry


class NotificationHub:
    """Owns the registry, the delivery channel, the bus and the materializer."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        bus_workers: int = 4,
        handler_timeout: float = 10.0,
        delivery_timeout: float = 5.0,
    ):
        self.registry = SessionRegistry()
        self.delivery = DeliveryChannel(self.registry, send_timeout=delivery_timeout)
        self.bus = EventBus(workers=bus_workers, handler_timeout=handler_timeout)
        self.materializer = NotificationMaterializer(session_factory, self.delivery)
        self.materializer.register(self.bus)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> "NotificationHub":
        return cls(
            session_factory,
            bus_workers=settings.event_bus_workers,
            handler_timeout=settings.event_handler_timeout_seconds,
            delivery_timeout=settings.delivery_timeout_seconds,
        )

    async def start(self) -> None:
        await self.bus.start()

    async def stop(self) -> None:
        await self.bus.stop(drain=True)
