from abc import ABC, abstractmethod
from typing import Any

from statebook.common.logging import get_logger


class BaseIntegration(ABC):
    """Common shape for the backends the service talks to.

    Subclasses name the backend they are currently routed to and answer a
    health probe; ``/health`` reports both through ``status()``.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(f"integrations.{name}")

    @property
    @abstractmethod
    def backend(self) -> str: ...

    @abstractmethod
    async def health_check(self) -> bool: ...

    async def status(self) -> dict[str, Any]:
        healthy = await self.health_check()
        if not healthy:
            self.logger.warning("%s backend '%s' is unhealthy", self.name, self.backend)
        return {"backend": self.backend, "healthy": healthy}
