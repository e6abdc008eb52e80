from __future__ import annotations

from salon_agenda.application.ports.service_catalog import ServiceCatalogPort
from salon_agenda.domain.entities.service_catalog import ServiceCatalogEntry
from salon_agenda.infrastructure.knowledge.service_catalog_data import (
    DEFAULT_DURATION_MINUTES,
    SERVICE_CATALOG,
)


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(self, catalog: dict[str, ServiceCatalogEntry] | None = None) -> None:
        self._catalog = catalog or SERVICE_CATALOG
        self._aliases: dict[str, str] = {}
        for key, entry in self._catalog.items():
            for alias in entry.aliases:
                self._aliases[alias.lower().strip()] = key

    def get_service(self, service_key: str) -> ServiceCatalogEntry | None:
        normalized_key = (service_key or "").lower().strip()
        entry = self._catalog.get(normalized_key)
        if entry:
            return entry
        alias_key = self._aliases.get(normalized_key)
        return self._catalog.get(alias_key) if alias_key else None

    def get_duration_minutes(self, service_key: str | None) -> int:
        entry = self.get_service(service_key) if service_key else None
        if not entry:
            return DEFAULT_DURATION_MINUTES
        return entry.duration_minutes

    def get_color(self, service_key: str | None) -> str | None:
        entry = self.get_service(service_key) if service_key else None
        return entry.color if entry else None
