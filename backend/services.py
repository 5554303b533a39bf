# CRUD services - create / update / delete with duplicate and absence checks
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from errors import ConflictError, NotFoundError, ValidationError
from models import CoverageAssignment, MedicalRecord, Resident, identity_of, parse_birthdate
from repositories import CoverageRepository, MedicalRecordRepository, ResidentRepository

logger = logging.getLogger(__name__)


def require_text(value: Optional[str], name: str) -> str:
    """Reject None and blank strings."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must not be empty")
    return value


def require_station_number(value: Any, name: str = "station") -> int:
    """Reject None, non-integers (bool included) and negative numbers."""
    if value is None:
        raise ValidationError(f"{name} must not be null")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer")
    if value < 0:
        raise ValidationError(f"{name} must not be negative")
    return value


class ResidentService:
    def __init__(self, residents: ResidentRepository):
        self.residents = residents

    def add(self, resident: Optional[Resident]) -> Resident:
        """Create a resident. Fails if the same (first, last) pair is already stored."""
        _require_person(resident, "Resident")
        with self.residents.lock:
            if self.residents.by_identity(resident.firstName, resident.lastName) is not None:
                logger.info("Resident %s already exists", identity_of(*resident.identity))
                raise ConflictError("Person already exists")
            self.residents.upsert(resident)
        return resident

    def update(self, resident: Optional[Resident]) -> Resident:
        """Overwrite contact and address fields; the name is the identity and never changes."""
        _require_person(resident, "Resident")
        with self.residents.lock:
            current = self.residents.by_identity(resident.firstName, resident.lastName)
            if current is None:
                logger.info("Resident not found for update: %s", identity_of(*resident.identity))
                raise NotFoundError(f"Person not found : {identity_of(*resident.identity)}")
            updated = replace(
                current,
                address=resident.address,
                city=resident.city,
                zip=resident.zip,
                phone=resident.phone,
                email=resident.email,
            )
            self.residents.upsert(updated)
        return updated

    def delete(self, first_name: Optional[str], last_name: Optional[str]) -> None:
        """Idempotent: deleting someone who is not stored succeeds silently."""
        require_text(first_name, "firstName")
        require_text(last_name, "lastName")
        with self.residents.lock:
            current = self.residents.by_identity(first_name, last_name)
            if current is None:
                logger.debug("Nothing to delete for resident %s", identity_of(first_name, last_name))
                return
            self.residents.delete(current)


class CoverageService:
    def __init__(self, coverage: CoverageRepository):
        self.coverage = coverage

    def add(self, assignment: Optional[CoverageAssignment]) -> CoverageAssignment:
        _require_assignment(assignment)
        with self.coverage.lock:
            if self.coverage.by_address(assignment.address) is not None:
                logger.info("Coverage already exists for address %s", assignment.address)
                raise ConflictError("FireStation already exists")
            self.coverage.upsert(assignment)
        return assignment

    def update(self, assignment: Optional[CoverageAssignment]) -> CoverageAssignment:
        """Change the station number covering an existing address."""
        _require_assignment(assignment)
        with self.coverage.lock:
            current = self.coverage.by_address(assignment.address)
            if current is None:
                logger.info("No coverage to update at address %s", assignment.address)
                raise NotFoundError("FireStation does not exist")
            updated = replace(current, station=assignment.station)
            self.coverage.upsert(updated)
        return updated

    def delete(self, address: Optional[str]) -> None:
        require_text(address, "address")
        with self.coverage.lock:
            current = self.coverage.by_address(address)
            if current is None:
                logger.debug("Nothing to delete for coverage at %s", address)
                return
            self.coverage.delete(current)


class MedicalRecordService:
    def __init__(self, medical_records: MedicalRecordRepository):
        self.medical_records = medical_records

    def add(self, record: Optional[MedicalRecord]) -> MedicalRecord:
        _require_medical_record(record)
        with self.medical_records.lock:
            if self.medical_records.by_identity(record.firstName, record.lastName) is not None:
                logger.info("Medical record already exists for %s", identity_of(*record.identity))
                raise ConflictError("Medical record for this person already exists")
            self.medical_records.upsert(record)
        return record

    def update(self, record: Optional[MedicalRecord]) -> MedicalRecord:
        _require_medical_record(record)
        with self.medical_records.lock:
            current = self.medical_records.by_identity(record.firstName, record.lastName)
            if current is None:
                logger.info("No medical record to update for %s", identity_of(*record.identity))
                raise NotFoundError("Medical record for this person does not exist")
            updated = replace(
                current,
                birthdate=record.birthdate,
                medications=list(record.medications),
                allergies=list(record.allergies),
            )
            self.medical_records.upsert(updated)
        return updated

    def delete(self, first_name: Optional[str], last_name: Optional[str]) -> None:
        require_text(first_name, "firstName")
        require_text(last_name, "lastName")
        with self.medical_records.lock:
            current = self.medical_records.by_identity(first_name, last_name)
            if current is None:
                logger.debug("Nothing to delete for medical record %s", identity_of(first_name, last_name))
                return
            self.medical_records.delete(current)


def _require_person(person: Any, label: str) -> None:
    if person is None:
        raise ValidationError(f"{label} must not be null")
    require_text(person.firstName, "firstName")
    require_text(person.lastName, "lastName")


def _require_assignment(assignment: Optional[CoverageAssignment]) -> None:
    if assignment is None:
        raise ValidationError("FireStation must not be null")
    require_text(assignment.address, "address")
    require_station_number(assignment.station)


def _require_medical_record(record: Optional[MedicalRecord]) -> None:
    _require_person(record, "Medical record")
    try:
        parse_birthdate(record.birthdate)
    except (TypeError, ValueError):
        raise ValidationError("birthdate must use the MM/dd/yyyy format")
