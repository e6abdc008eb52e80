from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceCatalogEntry:
    service_key: str
    display_name: str
    category: str  # "cut", "coloring", "cut_color"
    duration_minutes: int
    color: str
    aliases: tuple[str, ...] = ()
    price: float | None = None
