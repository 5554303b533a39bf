"""
JSON-file backed record store.

``RecordStore`` holds the three collections (residents, coverage
assignments, medical records) in memory.  ``load`` replaces them with
the content of the working data file and ``persist`` writes the whole
snapshot back after every mutation.  Writes go to a temporary file in
the same directory which then replaces the working file, so a crash
mid-write never leaves a truncated document behind.

Repositories mutate the lists returned by the accessors directly and
call ``persist`` afterwards.  All of this happens under ``lock``, a
single re-entrant lock shared by every layer above the store.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Union

from errors import StorageError
from models import CoverageAssignment, MedicalRecord, Resident

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

RESIDENTS_KEY = "persons"
COVERAGE_KEY = "firestations"
MEDICAL_RECORDS_KEY = "medicalrecords"


def initialize_data_file(seed_file: PathLike, data_file: PathLike) -> Path:
    """Copy the seed document over the working data file.

    The parent directory of ``data_file`` is created when missing.
    Raises ``StorageError`` if the seed cannot be read or the copy fails.
    """
    seed_path = Path(seed_file)
    data_path = Path(data_file)
    if not seed_path.is_file():
        raise StorageError(f"Seed file not found: {seed_path}")
    try:
        data_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(seed_path, data_path)
    except OSError as exc:
        raise StorageError(f"Could not initialize data file {data_path}: {exc}") from exc
    logger.info("Data file initialized at %s from %s", data_path.resolve(), seed_path)
    return data_path


class RecordStore:
    """In-memory snapshot of the three collections, persisted to one JSON file."""

    def __init__(self, data_file: PathLike):
        self.data_file = Path(data_file)
        self.lock = threading.RLock()
        self._residents: List[Resident] = []
        self._coverage: List[CoverageAssignment] = []
        self._medical_records: List[MedicalRecord] = []

    def load(self) -> None:
        """Read the data file, replacing whatever is held in memory.

        On any failure the previous snapshot is kept and ``StorageError``
        is raised.
        """
        with self.lock:
            try:
                with open(self.data_file, "r", encoding="utf-8") as f:
                    payload = json.load(f)
            except (OSError, ValueError) as exc:
                logger.error("Failed to read data file %s: %s", self.data_file, exc)
                raise StorageError(f"Could not read data file {self.data_file}: {exc}") from exc

            if not isinstance(payload, dict):
                raise StorageError(f"Data file {self.data_file} must hold a JSON object")

            try:
                residents = [Resident.from_dict(p) for p in _section(payload, RESIDENTS_KEY)]
                coverage = [CoverageAssignment.from_dict(c) for c in _section(payload, COVERAGE_KEY)]
                medical_records = [
                    MedicalRecord.from_dict(m) for m in _section(payload, MEDICAL_RECORDS_KEY)
                ]
            except (KeyError, TypeError, ValueError) as exc:
                logger.error("Malformed record in data file %s: %r", self.data_file, exc)
                raise StorageError(f"Malformed record in data file {self.data_file}: {exc!r}") from exc

            self._residents = residents
            self._coverage = coverage
            self._medical_records = medical_records
            logger.info(
                "Loaded data from %s: %d residents, %d coverage assignments, %d medical records",
                self.data_file.resolve(),
                len(residents),
                len(coverage),
                len(medical_records),
            )

    def persist(self) -> None:
        """Write the whole snapshot back to the data file atomically."""
        with self.lock:
            payload = self.snapshot()
            directory = self.data_file.parent
            tmp_name = None
            try:
                directory.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self.data_file.name}.", suffix=".tmp", dir=directory
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2, ensure_ascii=False)
                    f.write("\n")
                os.replace(tmp_name, self.data_file)
            except OSError as exc:
                logger.error("Failed to save data to file %s: %s", self.data_file, exc)
                if tmp_name and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise StorageError(f"Could not write data file {self.data_file}: {exc}") from exc
            logger.debug("Saved data to file %s", self.data_file)

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Plain-dict copy of the three collections, in file layout."""
        with self.lock:
            return {
                RESIDENTS_KEY: [r.to_dict() for r in self._residents],
                COVERAGE_KEY: [c.to_dict() for c in self._coverage],
                MEDICAL_RECORDS_KEY: [m.to_dict() for m in self._medical_records],
            }

    def residents(self) -> List[Resident]:
        return self._residents

    def coverage_assignments(self) -> List[CoverageAssignment]:
        return self._coverage

    def medical_records(self) -> List[MedicalRecord]:
        return self._medical_records


def _section(payload: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    items = payload.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise TypeError(f"'{key}' must be a list")
    return items
