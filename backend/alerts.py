# Alert queries - read-only joins across residents, coverage assignments and medical records
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional

from errors import NotFoundError, ValidationError
from models import (
    ChildAlert,
    CoverageReport,
    CoveredResident,
    FireOccupant,
    FireReport,
    FloodHousehold,
    FloodOccupant,
    PersonInfo,
    Resident,
    identity_of,
)
from repositories import CoverageRepository, MedicalRecordRepository, ResidentRepository
from services import require_station_number, require_text

logger = logging.getLogger(__name__)


def _distinct(values: List[str]) -> List[str]:
    """Drop exact duplicates, keeping first-seen order."""
    return list(dict.fromkeys(values))


class AlertService:
    """
    Derived views for the emergency-dispatch alerts.

    Every query validates its input, then computes its answer from one
    consistent snapshot (the store lock is held for the whole pass).
    A missing medical record for a resident the query needs aborts the
    whole query with DataIntegrityError; partial answers are never
    returned.
    """

    def __init__(
        self,
        residents: ResidentRepository,
        coverage: CoverageRepository,
        medical_records: MedicalRecordRepository,
        today: Optional[date] = None,
    ):
        self.residents = residents
        self.coverage = coverage
        self.medical_records = medical_records
        self._today = today

    @property
    def today(self) -> date:
        return self._today or date.today()

    @property
    def lock(self):
        return self.residents.lock

    def children_at_address(self, address: str) -> List[ChildAlert]:
        """
        Minors living at `address`, each with the other members of the
        household (same last name, different first name).
        Nobody at the address, or no minors, is an empty list.
        """
        require_text(address, "address")
        with self.lock:
            at_address = self.residents.by_address(address)
            minors = []
            for resident in at_address:
                record = self.medical_records.require(resident.firstName, resident.lastName)
                age = record.age(self.today)
                if not record.is_adult(self.today):
                    minors.append((resident, age))

        if not minors:
            logger.info("No child found at address %s", address)
            return []

        alerts = [
            ChildAlert(
                firstName=child.firstName,
                lastName=child.lastName,
                age=age,
                household=[
                    identity_of(p.firstName, p.lastName)
                    for p in at_address
                    if p.lastName == child.lastName and p.firstName != child.firstName
                ],
            )
            for child, age in minors
        ]
        logger.info("Children found at address %s: %d", address, len(alerts))
        return alerts

    def phones_by_coverage_number(self, number: int) -> List[str]:
        """Distinct phone numbers of everyone covered by station `number`."""
        require_station_number(number, "numberFireStation")
        with self.lock:
            addresses = self.coverage.addresses_for_coverage_number(number)
            if not addresses:
                logger.info("No address covered by station %s", number)
                return []
            phones = _distinct([r.phone for r in self.residents.by_addresses(addresses)])
        logger.info("Phones found for station %s: %d", number, len(phones))
        return phones

    def household_and_coverage_by_address(self, address: str) -> FireReport:
        """
        Residents at `address` with their medications and allergies, plus
        the station covering that exact address (None if unassigned).
        """
        require_text(address, "address")
        with self.lock:
            at_address = self.residents.by_address(address)
            occupants = []
            for resident in at_address:
                record = self.medical_records.require(resident.firstName, resident.lastName)
                occupants.append(
                    FireOccupant(
                        firstName=resident.firstName,
                        lastName=resident.lastName,
                        fullAddress=resident.fullAddress,
                        phone=resident.phone,
                        medications=list(record.medications),
                        allergies=list(record.allergies),
                    )
                )
            assignment = self.coverage.by_address(address)

        if not at_address and assignment is None:
            logger.info("No data for address %s", address)
            raise NotFoundError(f"No data found for address: {address}")

        return FireReport(
            residents=occupants,
            station=assignment.station if assignment is not None else None,
        )

    def households_by_coverage_numbers(self, numbers: List[int]) -> List[FloodHousehold]:
        """
        One household per address covered by any of `numbers`, even when
        nobody lives there.
        """
        if numbers is None or len(numbers) == 0:
            raise ValidationError("stationNumber list must not be empty")
        for number in numbers:
            require_station_number(number, "stationNumber")

        with self.lock:
            addresses = _distinct(
                [a for n in numbers for a in self.coverage.addresses_for_coverage_number(n)]
            )
            if not addresses:
                logger.info("No coverage for station numbers %s", numbers)
                raise NotFoundError(f"No FireStation exists with station numbers: {numbers}")

            by_address: Dict[str, List[Resident]] = {}
            for resident in self.residents.by_addresses(addresses):
                by_address.setdefault(resident.address, []).append(resident)

            households = []
            for address in addresses:
                occupants = []
                for resident in by_address.get(address, []):
                    record = self.medical_records.require(resident.firstName, resident.lastName)
                    occupants.append(
                        FloodOccupant(
                            firstName=resident.firstName,
                            lastName=resident.lastName,
                            phone=resident.phone,
                            age=record.age(self.today),
                            medications=list(record.medications),
                            allergies=list(record.allergies),
                        )
                    )
                households.append(FloodHousehold(address=address, occupants=occupants))

        logger.info("Flood report built for %d addresses", len(households))
        return households

    def people_by_last_name(self, last_name: str) -> List[PersonInfo]:
        require_text(last_name, "lastName")
        with self.lock:
            people = self.residents.by_last_name(last_name)
            if not people:
                logger.info("No person found with last name %s", last_name)
                raise NotFoundError(f"No Person found with lastName: {last_name}")
            infos = []
            for person in people:
                record = self.medical_records.require(person.firstName, person.lastName)
                infos.append(
                    PersonInfo(
                        firstName=person.firstName,
                        lastName=person.lastName,
                        fullAddress=person.fullAddress,
                        age=record.age(self.today),
                        email=person.email,
                        medications=list(record.medications),
                        allergies=list(record.allergies),
                    )
                )
        logger.info("%d people found with last name %s", len(infos), last_name)
        return infos

    def emails_by_city(self, city: str) -> List[str]:
        require_text(city, "city")
        wanted = city.casefold()
        emails = _distinct([r.email for r in self.residents.all() if r.city.casefold() == wanted])
        if not emails:
            logger.info("No email found for city %s", city)
            raise NotFoundError(f"No Email found with City: {city}")
        logger.info("%d emails found for city %s", len(emails), city)
        return emails

    def residents_covered_by_station(self, number: int) -> CoverageReport:
        """Residents covered by station `number`, with adult and child counts."""
        require_station_number(number, "stationNumber")
        with self.lock:
            addresses = self.coverage.addresses_for_coverage_number(number)
            if not addresses:
                logger.info("No address covered by station %s", number)
                raise NotFoundError(f"No FireStation with station number: {number}")
            covered = []
            adults = 0
            for resident in self.residents.by_addresses(addresses):
                record = self.medical_records.require(resident.firstName, resident.lastName)
                if record.is_adult(self.today):
                    adults += 1
                covered.append(
                    CoveredResident(
                        firstName=resident.firstName,
                        lastName=resident.lastName,
                        fullAddress=resident.fullAddress,
                        phone=resident.phone,
                    )
                )

        logger.info("Station %s covers %d residents", number, len(covered))
        return CoverageReport(residents=covered, adults=adults, children=len(covered) - adults)
