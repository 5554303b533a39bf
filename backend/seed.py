# Seed data - copy the seed document to the working data file and load it
from __future__ import annotations

import logging

from config import Settings
from store import RecordStore, initialize_data_file

logger = logging.getLogger(__name__)


def bootstrap_store(settings: Settings) -> RecordStore:
    """Create the store for `settings.data_file`, seeding the file first when needed."""
    if settings.reset_on_startup or not settings.data_file.exists():
        initialize_data_file(settings.seed_file, settings.data_file)
    store = RecordStore(settings.data_file)
    store.load()
    return store


def seed_data(store: RecordStore, settings: Settings) -> None:
    """Reset the working file to the seed document and reload `store` from it."""
    with store.lock:
        initialize_data_file(settings.seed_file, store.data_file)
        store.load()
    snapshot = store.snapshot()
    logger.info(
        "Seed data restored: %d residents, %d coverage assignments, %d medical records",
        len(snapshot["persons"]),
        len(snapshot["firestations"]),
        len(snapshot["medicalrecords"]),
    )


if __name__ == "__main__":
    from logging_config import setup_logging

    settings = Settings(reset_on_startup=True)
    setup_logging(settings.log_level)
    bootstrap_store(settings)
