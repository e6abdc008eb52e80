from __future__ import annotations

from salon_agenda.domain.entities.service_catalog import ServiceCatalogEntry

DEFAULT_DURATION_MINUTES = 60

SERVICE_CATALOG: dict[str, ServiceCatalogEntry] = {
    "coupe": ServiceCatalogEntry(
        service_key="coupe",
        display_name="Coupe",
        category="cut",
        duration_minutes=60,
        color="#34C759",
        aliases=("cut", "haircut"),
        price=35,
    ),
    "coloration": ServiceCatalogEntry(
        service_key="coloration",
        display_name="Coloration",
        category="coloring",
        duration_minutes=90,
        color="#FF9500",
        aliases=("coloring", "colour", "color"),
        price=60,
    ),
    "cut_color": ServiceCatalogEntry(
        service_key="cut_color",
        display_name="Coupe + Coloration",
        category="cut_color",
        duration_minutes=120,
        color="#FF3B30",
        aliases=("coupe + coloration", "coupe+coloration", "cut+color", "cut + color"),
        price=85,
    ),
}
