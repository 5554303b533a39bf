# Backend main entry point - thin HTTP layer over the services
# Run from backend/: uvicorn main:create_app --factory --reload
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from alerts import AlertService
from config import Settings
from errors import (
    ConflictError,
    DataIntegrityError,
    NotFoundError,
    SafetyNetError,
    StorageError,
    ValidationError,
)
from logging_config import setup_logging
from models import CoverageAssignment, MedicalRecord, Resident, parse_birthdate
from repositories import CoverageRepository, MedicalRecordRepository, ResidentRepository
from seed import bootstrap_store, seed_data
from services import CoverageService, MedicalRecordService, ResidentService

logger = logging.getLogger(__name__)

ERROR_STATUS = [
    (ValidationError, 400),
    (ConflictError, 409),
    (NotFoundError, 404),
    (DataIntegrityError, 500),
    (StorageError, 500),
]


# Request models
class PersonPayload(BaseModel):
    firstName: str
    lastName: str
    address: str = ""
    city: str = ""
    zip: str = ""
    phone: str = ""
    email: str = ""

    def to_record(self) -> Resident:
        return Resident(**self.model_dump())


class FireStationPayload(BaseModel):
    address: str
    station: int = Field(ge=0)

    def to_record(self) -> CoverageAssignment:
        return CoverageAssignment(address=self.address, station=self.station)


class MedicalRecordPayload(BaseModel):
    firstName: str
    lastName: str
    birthdate: str  # MM/dd/yyyy
    medications: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)

    @field_validator("birthdate")
    @classmethod
    def birthdate_format(cls, value: str) -> str:
        parse_birthdate(value)
        return value

    def to_record(self) -> MedicalRecord:
        return MedicalRecord(**self.model_dump())


# Service lookups, resolved per request from app.state
def get_alerts(request: Request) -> AlertService:
    return request.app.state.alerts


def get_residents(request: Request) -> ResidentService:
    return request.app.state.resident_service


def get_coverage(request: Request) -> CoverageService:
    return request.app.state.coverage_service


def get_medical_records(request: Request) -> MedicalRecordService:
    return request.app.state.medical_record_service


async def safetynet_error_handler(request: Request, exc: SafetyNetError) -> JSONResponse:
    status_code = next((code for kind, code in ERROR_STATUS if isinstance(exc, kind)), 500)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.url.path, status_code, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API: load the data file, wire repositories and services, register routes."""
    settings = settings or Settings()
    setup_logging(settings.log_level, settings.log_file or None)

    store = bootstrap_store(settings)
    residents = ResidentRepository(store)
    coverage = CoverageRepository(store)
    medical_records = MedicalRecordRepository(store)

    app = FastAPI(title=settings.project_name)
    app.state.settings = settings
    app.state.store = store
    app.state.alerts = AlertService(residents, coverage, medical_records)
    app.state.resident_service = ResidentService(residents)
    app.state.coverage_service = CoverageService(coverage)
    app.state.medical_record_service = MedicalRecordService(medical_records)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SafetyNetError, safetynet_error_handler)

    @app.get("/")
    def read_root():
        return {"message": "SafetyNet Alerts API"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    # Residents
    @app.post("/person", status_code=201)
    def add_person(payload: PersonPayload, service: ResidentService = Depends(get_residents)):
        return service.add(payload.to_record()).to_dict()

    @app.put("/person")
    def update_person(payload: PersonPayload, service: ResidentService = Depends(get_residents)):
        return service.update(payload.to_record()).to_dict()

    @app.delete("/person", status_code=204)
    def delete_person(
        firstName: str,
        lastName: str,
        service: ResidentService = Depends(get_residents),
    ):
        service.delete(firstName, lastName)
        return Response(status_code=204)

    # Coverage assignments
    @app.get("/firestation")
    def get_residents_covered(stationNumber: int, alerts: AlertService = Depends(get_alerts)):
        """Residents covered by a station with adult and child counts."""
        return alerts.residents_covered_by_station(stationNumber)

    @app.post("/firestation", status_code=201)
    def add_fire_station(payload: FireStationPayload, service: CoverageService = Depends(get_coverage)):
        return service.add(payload.to_record()).to_dict()

    @app.put("/firestation")
    def update_fire_station(payload: FireStationPayload, service: CoverageService = Depends(get_coverage)):
        return service.update(payload.to_record()).to_dict()

    @app.delete("/firestation", status_code=204)
    def delete_fire_station(address: str, service: CoverageService = Depends(get_coverage)):
        service.delete(address)
        return Response(status_code=204)

    # Medical records
    @app.post("/medicalrecord", status_code=201)
    def add_medical_record(
        payload: MedicalRecordPayload,
        service: MedicalRecordService = Depends(get_medical_records),
    ):
        return service.add(payload.to_record()).to_dict()

    @app.put("/medicalrecord")
    def update_medical_record(
        payload: MedicalRecordPayload,
        service: MedicalRecordService = Depends(get_medical_records),
    ):
        return service.update(payload.to_record()).to_dict()

    @app.delete("/medicalrecord", status_code=204)
    def delete_medical_record(
        firstName: str,
        lastName: str,
        service: MedicalRecordService = Depends(get_medical_records),
    ):
        service.delete(firstName, lastName)
        return Response(status_code=204)

    # Alerts
    @app.get("/childAlert")
    def child_alert(address: str, alerts: AlertService = Depends(get_alerts)):
        """Children at an address with their household; empty list when there are none."""
        return alerts.children_at_address(address)

    @app.get("/phoneAlert")
    def phone_alert(numberFireStation: int, alerts: AlertService = Depends(get_alerts)):
        return alerts.phones_by_coverage_number(numberFireStation)

    @app.get("/fire")
    def fire(address: str, alerts: AlertService = Depends(get_alerts)):
        return alerts.household_and_coverage_by_address(address)

    @app.get("/flood/stations")
    def flood(stationNumber: List[int] = Query(...), alerts: AlertService = Depends(get_alerts)):
        """Households covered by one or more stations, including empty ones."""
        return alerts.households_by_coverage_numbers(stationNumber)

    @app.get("/personInfoLastName")
    def person_info_last_name(lastName: str, alerts: AlertService = Depends(get_alerts)):
        return alerts.people_by_last_name(lastName)

    @app.get("/communityEmail")
    def community_email(city: str, alerts: AlertService = Depends(get_alerts)):
        return alerts.emails_by_city(city)

    # Demo helpers
    @app.get("/demo/status")
    def demo_status():
        """Whether demo mode is enabled."""
        return {"demoMode": settings.demo_mode}

    @app.post("/demo/reset")
    def demo_reset():
        """
        Restore the working data file from the seed and reload it.
        Only available when DEMO_MODE=true.
        """
        if not settings.demo_mode:
            raise HTTPException(status_code=404, detail="Demo reset not available")
        seed_data(store, settings)
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=8000)
