from functools import lru_cache
import logging

from salon_agenda.application.mappers.booking_mapper import BookingMapper
from salon_agenda.application.ports.clock import ClockPort
from salon_agenda.application.ports.document_store import DocumentCollectionPort
from salon_agenda.application.ports.service_catalog import ServiceCatalogPort
from salon_agenda.application.use_cases.availability_reconciler import AvailabilityReconciler
from salon_agenda.application.use_cases.event_store import EventStore
from salon_agenda.application.use_cases.slot_store import SlotStore
from salon_agenda.core.config import Settings, settings
from salon_agenda.core.logger import configure_logging
from salon_agenda.infrastructure.clock.system_clock import SystemClock
from salon_agenda.infrastructure.firestore.firestore_client import FirestoreClient
from salon_agenda.infrastructure.firestore.firestore_collection import FirestoreCollection
from salon_agenda.infrastructure.knowledge.service_catalog_store import ServiceCatalogStore
from salon_agenda.infrastructure.store.json_store import JsonDocumentCollection
from salon_agenda.infrastructure.store.memory_store import MemoryDocumentCollection


def get_store_provider(config: Settings = settings) -> str:
    provider = (config.STORE_PROVIDER or "").strip().lower()
    if provider:
        return provider
    if config.ENV.lower() in {"dev", "local"}:
        return "json"
    return "memory"


@lru_cache
def get_firestore_client() -> FirestoreClient:
    return FirestoreClient()


def get_collection(name: str, config: Settings = settings) -> DocumentCollectionPort:
    provider = get_store_provider(config)
    if provider == "firestore":
        return FirestoreCollection(get_firestore_client(), name)
    if provider == "json":
        return JsonDocumentCollection(name, data_dir=config.JSON_STORE_DIR)
    if provider == "memory":
        return MemoryDocumentCollection(name)
    raise ValueError(f"Unknown STORE_PROVIDER: {provider}")


def get_clock() -> ClockPort:
    return SystemClock()


def get_service_catalog() -> ServiceCatalogPort:
    return ServiceCatalogStore()


def get_event_store(
    config: Settings = settings,
    clock: ClockPort | None = None,
    bookings: DocumentCollectionPort | None = None,
    availability: DocumentCollectionPort | None = None,
) -> EventStore:
    clock = clock or get_clock()
    reconciler = AvailabilityReconciler(
        availability=availability or get_collection(config.AVAILABILITY_COLLECTION, config),
        clock=clock,
    )
    return EventStore(
        bookings=bookings or get_collection(config.BOOKINGS_COLLECTION, config),
        mapper=BookingMapper(get_service_catalog(), persist_duration=config.PERSIST_DURATION),
        reconciler=reconciler,
        clock=clock,
        week_starts_on=config.WEEK_STARTS_ON,
    )


def get_slot_store(
    config: Settings = settings,
    clock: ClockPort | None = None,
    slots: DocumentCollectionPort | None = None,
) -> SlotStore:
    return SlotStore(slots=slots or get_collection(config.SLOTS_COLLECTION, config), clock=clock or get_clock())


def get_container(config: Settings = settings) -> dict[str, object]:
    """Build the process-wide stores once; callers keep the returned handles."""
    configure_logging(config.LOG_LEVEL)
    clock = get_clock()
    logger = logging.getLogger(__name__)
    logger.info("Using %s document store (ENV=%s)", get_store_provider(config), config.ENV)
    return {
        "events": get_event_store(config, clock=clock),
        "slots": get_slot_store(config, clock=clock),
        "clock": clock,
    }
