"""Application Context: process-scoped holder for the persistence gateway.

Invariants:
    - One AppContext per process, created before orchestration and stored on app.state
    - The gateway slot is written once by the startup orchestrator and
      cleared again on shutdown
    - Reading the gateway before it is attached raises ServiceNotReadyError
"""

from catalog.config import Settings
from catalog.core.errors import ServiceNotReadyError
from catalog.infrastructure.database import PersistenceGateway


class AppContext:
    def __init__(self, settings: Settings, gateway: PersistenceGateway | None = None):
        self.settings = settings
        self._gateway = gateway

    @property
    def ready(self) -> bool:
        return self._gateway is not None

    @property
    def gateway(self) -> PersistenceGateway:
        if self._gateway is None:
            raise ServiceNotReadyError("persistence")
        return self._gateway

    def attach_gateway(self, gateway: PersistenceGateway) -> None:
        if self._gateway is not None and self._gateway is not gateway:
            raise RuntimeError("Persistence gateway already attached")
        self._gateway = gateway

    def detach_gateway(self) -> None:
        self._gateway = None
