# Record models - residents, coverage assignments, medical records and derived views
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

BIRTHDATE_FORMAT = "%m/%d/%Y"
ADULT_AGE = 18


def identity_of(first_name: str, last_name: str) -> str:
    """Identity string used in household lists: "First Last"."""
    return f"{first_name} {last_name}"


def parse_birthdate(value: str) -> date:
    """Parse a MM/dd/yyyy birth date. Raises ValueError on bad input."""
    return datetime.strptime(value, BIRTHDATE_FORMAT).date()


def years_between(start: date, end: date) -> int:
    """Whole years elapsed from start to end."""
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return years


@dataclass
class Resident:
    """Person living at an address"""
    firstName: str
    lastName: str
    address: str = ""
    city: str = ""
    zip: str = ""
    phone: str = ""
    email: str = ""

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.firstName, self.lastName)

    @property
    def fullAddress(self) -> str:
        return f"{self.address} {self.zip} {self.city}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Resident":
        return cls(
            firstName=str(data["firstName"]),
            lastName=str(data["lastName"]),
            address=str(data.get("address") or ""),
            city=str(data.get("city") or ""),
            zip=str(data.get("zip") or ""),
            phone=str(data.get("phone") or ""),
            email=str(data.get("email") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firstName": self.firstName,
            "lastName": self.lastName,
            "address": self.address,
            "city": self.city,
            "zip": self.zip,
            "phone": self.phone,
            "email": self.email,
        }


@dataclass
class CoverageAssignment:
    """One address covered by one fire station number"""
    address: str
    station: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CoverageAssignment":
        # older seed files store the station number as a string
        station = int(data["station"])
        if station < 0:
            raise ValueError(f"station number must not be negative: {station}")
        return cls(address=str(data["address"]), station=station)

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "station": self.station}


@dataclass
class MedicalRecord:
    """Birth date, medications and allergies of a person"""
    firstName: str
    lastName: str
    birthdate: str  # MM/dd/yyyy
    medications: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.firstName, self.lastName)

    def age(self, today: Optional[date] = None) -> int:
        """Age in whole years at `today` (defaults to the current date)."""
        return years_between(parse_birthdate(self.birthdate), today or date.today())

    def is_adult(self, today: Optional[date] = None) -> bool:
        """Adult means strictly older than 18; an 18 year old is still a minor."""
        return self.age(today) > ADULT_AGE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MedicalRecord":
        birthdate = str(data["birthdate"])
        parse_birthdate(birthdate)
        return cls(
            firstName=str(data["firstName"]),
            lastName=str(data["lastName"]),
            birthdate=birthdate,
            medications=[str(m) for m in data.get("medications") or []],
            allergies=[str(a) for a in data.get("allergies") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firstName": self.firstName,
            "lastName": self.lastName,
            "birthdate": self.birthdate,
            "medications": list(self.medications),
            "allergies": list(self.allergies),
        }


# Derived views returned by the alert queries

@dataclass
class ChildAlert:
    firstName: str
    lastName: str
    age: int
    household: List[str] = field(default_factory=list)


@dataclass
class FireOccupant:
    firstName: str
    lastName: str
    fullAddress: str
    phone: str
    medications: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)


@dataclass
class FireReport:
    residents: List[FireOccupant] = field(default_factory=list)
    station: Optional[int] = None


@dataclass
class FloodOccupant:
    firstName: str
    lastName: str
    phone: str
    age: int
    medications: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)


@dataclass
class FloodHousehold:
    address: str
    occupants: List[FloodOccupant] = field(default_factory=list)


@dataclass
class PersonInfo:
    firstName: str
    lastName: str
    fullAddress: str
    age: int
    email: str
    medications: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)


@dataclass
class CoveredResident:
    firstName: str
    lastName: str
    fullAddress: str
    phone: str


@dataclass
class CoverageReport:
    """Residents covered by a station with adult/child counts."""
    residents: List[CoveredResident] = field(default_factory=list)
    adults: int = 0
    children: int = 0
