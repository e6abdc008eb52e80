from __future__ import annotations

from abc import ABC, abstractmethod

from salon_agenda.domain.entities.service_catalog import ServiceCatalogEntry


class ServiceCatalogPort(ABC):
    @abstractmethod
    def get_service(self, service_key: str) -> ServiceCatalogEntry | None:
        """Get service catalog entry by service key or alias."""
        raise NotImplementedError

    @abstractmethod
    def get_duration_minutes(self, service_key: str | None) -> int:
        """Get default appointment duration in minutes. 60 for unknown services."""
        raise NotImplementedError

    @abstractmethod
    def get_color(self, service_key: str | None) -> str | None:
        """Get display colour for a service, or None if the service has none."""
        raise NotImplementedError
