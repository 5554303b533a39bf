# Collection repositories - identity and attribute lookups over the record store
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from errors import DataIntegrityError, StorageError
from models import CoverageAssignment, MedicalRecord, Resident, identity_of
from store import RecordStore

logger = logging.getLogger(__name__)


class _Repository:
    """Shared plumbing: every repository works on one RecordStore and its lock."""

    def __init__(self, store: RecordStore):
        self.store = store

    @property
    def lock(self):
        return self.store.lock

    def _commit(self, collection: list, items: list) -> None:
        """Swap in `items` and persist; on a failed write the previous contents come back."""
        with self.lock:
            previous = collection[:]
            collection[:] = items
            try:
                self.store.persist()
            except StorageError:
                collection[:] = previous
                raise


class ResidentRepository(_Repository):

    def all(self) -> List[Resident]:
        with self.lock:
            return list(self.store.residents())

    def by_identity(self, first_name: str, last_name: str) -> Optional[Resident]:
        """Case-sensitive match on (first name, last name)."""
        with self.lock:
            for resident in self.store.residents():
                if resident.firstName == first_name and resident.lastName == last_name:
                    return resident
        return None

    def by_last_name(self, last_name: str) -> List[Resident]:
        """Case-insensitive exact match on last name."""
        wanted = last_name.casefold()
        with self.lock:
            return [r for r in self.store.residents() if r.lastName.casefold() == wanted]

    def by_addresses(self, addresses: Iterable[str]) -> List[Resident]:
        """Residents whose address equals one of `addresses` exactly. Collection order."""
        wanted = set(addresses)
        with self.lock:
            return [r for r in self.store.residents() if r.address in wanted]

    def by_address(self, address: str) -> List[Resident]:
        return self.by_addresses([address])

    def upsert(self, resident: Resident) -> None:
        """Replace any resident with the same identity, then persist."""
        with self.lock:
            residents = self.store.residents()
            self._commit(residents, [r for r in residents if r.identity != resident.identity] + [resident])
        logger.info("Resident saved: %s", identity_of(*resident.identity))

    def delete(self, resident: Resident) -> None:
        with self.lock:
            residents = self.store.residents()
            self._commit(residents, [r for r in residents if r.identity != resident.identity])
        logger.info("Resident deleted: %s", identity_of(*resident.identity))


class CoverageRepository(_Repository):

    def all(self) -> List[CoverageAssignment]:
        with self.lock:
            return list(self.store.coverage_assignments())

    def by_address(self, address: str) -> Optional[CoverageAssignment]:
        """Case-sensitive match on address, the identity of an assignment."""
        with self.lock:
            for assignment in self.store.coverage_assignments():
                if assignment.address == address:
                    return assignment
        return None

    def addresses_for_coverage_number(self, number: int) -> List[str]:
        with self.lock:
            return [c.address for c in self.store.coverage_assignments() if c.station == number]

    def upsert(self, assignment: CoverageAssignment) -> None:
        """One assignment per address: an existing one at the same address is replaced."""
        with self.lock:
            coverage = self.store.coverage_assignments()
            self._commit(coverage, [c for c in coverage if c.address != assignment.address] + [assignment])
        logger.info("Coverage saved: %s -> station %s", assignment.address, assignment.station)

    def delete(self, assignment: CoverageAssignment) -> None:
        with self.lock:
            coverage = self.store.coverage_assignments()
            self._commit(coverage, [c for c in coverage if c.address != assignment.address])
        logger.info("Coverage deleted: %s -> station %s", assignment.address, assignment.station)


class MedicalRecordRepository(_Repository):

    def all(self) -> List[MedicalRecord]:
        with self.lock:
            return list(self.store.medical_records())

    def by_identity(self, first_name: str, last_name: str) -> Optional[MedicalRecord]:
        with self.lock:
            for record in self.store.medical_records():
                if record.firstName == first_name and record.lastName == last_name:
                    return record
        return None

    def require(self, first_name: str, last_name: str) -> MedicalRecord:
        """Like by_identity, but a missing record means the stored data is inconsistent."""
        record = self.by_identity(first_name, last_name)
        if record is None:
            logger.error("No medical record for %s", identity_of(first_name, last_name))
            raise DataIntegrityError(
                f"Medical record not found for: {identity_of(first_name, last_name)}"
            )
        return record

    def upsert(self, record: MedicalRecord) -> None:
        with self.lock:
            records = self.store.medical_records()
            self._commit(records, [m for m in records if m.identity != record.identity] + [record])
        logger.info("Medical record saved: %s", identity_of(*record.identity))

    def delete(self, record: MedicalRecord) -> None:
        with self.lock:
            records = self.store.medical_records()
            self._commit(records, [m for m in records if m.identity != record.identity])
        logger.info("Medical record deleted: %s", identity_of(*record.identity))
