"""
Shared pytest fixtures: a small, self-consistent data set written to a
temporary data file, plus the store, repositories, services and API
client built on top of it.

Birth dates are computed relative to today so the ages asserted in the
tests never drift.
"""
import json
from datetime import date

import pytest
from fastapi.testclient import TestClient

from alerts import AlertService
from config import Settings
from main import create_app
from repositories import CoverageRepository, MedicalRecordRepository, ResidentRepository
from services import CoverageService, MedicalRecordService, ResidentService
from store import RecordStore


def birthdate_years_ago(years: int, days_after: int = 0) -> str:
    """MM/dd/yyyy birth date for someone who turns `years` today (or `days_after` days from now)."""
    today = date.today()
    try:
        birthday = today.replace(year=today.year - years)
    except ValueError:  # Feb 29 in a non-leap year
        birthday = today.replace(year=today.year - years, day=28)
    birthday = date.fromordinal(birthday.toordinal() + days_after)
    return birthday.strftime("%m/%d/%Y")


def person(first, last, address, city="Culver", zip_code="97451", phone="841-874-0000", email="x@email.com"):
    return {
        "firstName": first,
        "lastName": last,
        "address": address,
        "city": city,
        "zip": zip_code,
        "phone": phone,
        "email": email,
    }


def medical(first, last, age, medications=None, allergies=None):
    return {
        "firstName": first,
        "lastName": last,
        "birthdate": birthdate_years_ago(age),
        "medications": medications or [],
        "allergies": allergies or [],
    }


def sample_document() -> dict:
    """
    - 1509 Culver St (station 3): John Boyd (40), Jacob Boyd (7)
    - 834 Binoc Ave (station 3): Tessa Carman (12), shares John's phone
    - 644 Gershwin Cir (station 1): Peter Duncan (25), shares John's email
    - 489 Manchester St (station 4): Lily Cooper (30), lives in Paris
    - 112 Steppes Pl (station 4): Ron Peters, exactly 18 today
    - 1 Boulevard Carnot (station 9): nobody lives there
    """
    return {
        "persons": [
            person("John", "Boyd", "1509 Culver St", phone="841-874-6512", email="jaboyd@email.com"),
            person("Jacob", "Boyd", "1509 Culver St", phone="841-874-6513", email="drk@email.com"),
            person("Tessa", "Carman", "834 Binoc Ave", phone="841-874-6512", email="tenz@email.com"),
            person("Peter", "Duncan", "644 Gershwin Cir", phone="841-874-6544", email="jaboyd@email.com"),
            person("Lily", "Cooper", "489 Manchester St", city="Paris", zip_code="75001",
                   phone="841-874-9845", email="lily@email.com"),
            person("Ron", "Peters", "112 Steppes Pl", phone="841-874-8888", email="rpeters@email.com"),
        ],
        "firestations": [
            {"address": "1509 Culver St", "station": 3},
            {"address": "834 Binoc Ave", "station": "3"},
            {"address": "644 Gershwin Cir", "station": 1},
            {"address": "489 Manchester St", "station": 4},
            {"address": "112 Steppes Pl", "station": 4},
            {"address": "1 Boulevard Carnot", "station": 9},
        ],
        "medicalrecords": [
            medical("John", "Boyd", 40, ["aznol:350mg", "hydrapermazol:100mg"], ["nillacilan"]),
            medical("Jacob", "Boyd", 7, [], ["peanut"]),
            medical("Tessa", "Carman", 12),
            medical("Peter", "Duncan", 25, [], ["shellfish"]),
            medical("Lily", "Cooper", 30),
            medical("Ron", "Peters", 18),
        ],
    }


def write_document(path, document) -> None:
    path.write_text(json.dumps(document), encoding="utf-8")


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "data.json"
    write_document(path, sample_document())
    return path


@pytest.fixture
def store(data_file):
    record_store = RecordStore(data_file)
    record_store.load()
    return record_store


@pytest.fixture
def resident_repo(store):
    return ResidentRepository(store)


@pytest.fixture
def coverage_repo(store):
    return CoverageRepository(store)


@pytest.fixture
def medical_repo(store):
    return MedicalRecordRepository(store)


@pytest.fixture
def alerts(resident_repo, coverage_repo, medical_repo):
    return AlertService(resident_repo, coverage_repo, medical_repo)


@pytest.fixture
def resident_service(resident_repo):
    return ResidentService(resident_repo)


@pytest.fixture
def coverage_service(coverage_repo):
    return CoverageService(coverage_repo)


@pytest.fixture
def medical_service(medical_repo):
    return MedicalRecordService(medical_repo)


def read_saved(path) -> dict:
    """What is actually on disk right now."""
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def settings(tmp_path):
    seed_file = tmp_path / "seed.json"
    write_document(seed_file, sample_document())
    return Settings(
        data_file=tmp_path / "work" / "data.json",
        seed_file=seed_file,
        reset_on_startup=True,
    )


@pytest.fixture
def client(settings):
    """TestClient over an app serving a fresh copy of the sample document."""
    return TestClient(create_app(settings))
