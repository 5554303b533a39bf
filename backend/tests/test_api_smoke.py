"""
API smoke tests using FastAPI TestClient
"""
from conftest import read_saved


class TestRoot:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestPersonEndpoints:
    def test_create_returns_201(self, client, settings):
        payload = {"firstName": "Ana", "lastName": "Lopez", "address": "1 Main St", "city": "Culver",
                   "zip": "97451", "phone": "111", "email": "ana@email.com"}
        response = client.post("/person", json=payload)
        assert response.status_code == 201
        assert response.json() == payload
        assert payload in read_saved(settings.data_file)["persons"]

    def test_create_duplicate_is_409(self, client):
        response = client.post("/person", json={"firstName": "John", "lastName": "Boyd"})
        assert response.status_code == 409
        assert "detail" in response.json()

    def test_create_blank_name_is_400(self, client):
        response = client.post("/person", json={"firstName": " ", "lastName": "Boyd"})
        assert response.status_code == 400

    def test_create_without_body_is_422(self, client):
        assert client.post("/person").status_code == 422

    def test_update(self, client):
        response = client.put("/person", json={"firstName": "John", "lastName": "Boyd", "address": "2 New St",
                                               "city": "Culver", "zip": "97451", "phone": "999",
                                               "email": "new@email.com"})
        assert response.status_code == 200
        assert response.json()["phone"] == "999"

    def test_update_unknown_is_404(self, client):
        response = client.put("/person", json={"firstName": "Nobody", "lastName": "Here"})
        assert response.status_code == 404

    def test_delete_is_204_even_when_absent(self, client):
        assert client.delete("/person", params={"firstName": "John", "lastName": "Boyd"}).status_code == 204
        assert client.delete("/person", params={"firstName": "John", "lastName": "Boyd"}).status_code == 204


class TestFireStationEndpoints:
    def test_create_update_delete(self, client, settings):
        assert client.post("/firestation", json={"address": "10 Downing St", "station": 5}).status_code == 201
        response = client.put("/firestation", json={"address": "10 Downing St", "station": 6})
        assert response.status_code == 200
        assert response.json() == {"address": "10 Downing St", "station": 6}
        assert client.delete("/firestation", params={"address": "10 Downing St"}).status_code == 204
        saved = read_saved(settings.data_file)["firestations"]
        assert all(c["address"] != "10 Downing St" for c in saved)

    def test_negative_station_is_422(self, client):
        response = client.post("/firestation", json={"address": "10 Downing St", "station": -1})
        assert response.status_code == 422

    def test_covered_residents(self, client):
        response = client.get("/firestation", params={"stationNumber": 4})
        assert response.status_code == 200
        data = response.json()
        assert data["adults"] == 1
        assert data["children"] == 1
        assert {r["firstName"] for r in data["residents"]} == {"Lily", "Ron"}

    def test_covered_residents_unknown_station_is_404(self, client):
        assert client.get("/firestation", params={"stationNumber": 42}).status_code == 404


class TestMedicalRecordEndpoints:
    def test_create_and_conflict(self, client):
        payload = {"firstName": "Ana", "lastName": "Lopez", "birthdate": "01/15/1990",
                   "medications": ["aspirin"], "allergies": []}
        assert client.post("/medicalrecord", json=payload).status_code == 201
        assert client.post("/medicalrecord", json=payload).status_code == 409

    def test_bad_birthdate_is_422(self, client):
        response = client.post("/medicalrecord", json={"firstName": "Ana", "lastName": "Lopez",
                                                       "birthdate": "1990-01-15"})
        assert response.status_code == 422

    def test_delete_without_stored_record_is_204(self, client):
        response = client.delete("/medicalrecord", params={"firstName": "Nobody", "lastName": "Here"})
        assert response.status_code == 204


class TestAlertEndpoints:
    def test_child_alert(self, client):
        response = client.get("/childAlert", params={"address": "1509 Culver St"})
        assert response.status_code == 200
        assert response.json() == [
            {"firstName": "Jacob", "lastName": "Boyd", "age": 7, "household": ["John Boyd"]}
        ]

    def test_child_alert_without_children_is_empty_list(self, client):
        response = client.get("/childAlert", params={"address": "644 Gershwin Cir"})
        assert response.status_code == 200
        assert response.json() == []

    def test_phone_alert(self, client):
        response = client.get("/phoneAlert", params={"numberFireStation": 3})
        assert response.json() == ["841-874-6512", "841-874-6513"]

    def test_phone_alert_negative_is_400(self, client):
        assert client.get("/phoneAlert", params={"numberFireStation": -1}).status_code == 400

    def test_fire_uninhabited_address(self, client):
        response = client.get("/fire", params={"address": "1 Boulevard Carnot"})
        assert response.status_code == 200
        assert response.json() == {"residents": [], "station": 9}

    def test_fire_unknown_address_is_404(self, client):
        assert client.get("/fire", params={"address": "Nowhere"}).status_code == 404

    def test_flood_empty_household_is_200(self, client):
        response = client.get("/flood/stations", params={"stationNumber": [9]})
        assert response.status_code == 200
        assert response.json() == [{"address": "1 Boulevard Carnot", "occupants": []}]

    def test_flood_several_stations(self, client):
        response = client.get("/flood/stations", params={"stationNumber": [1, 4]})
        addresses = [h["address"] for h in response.json()]
        assert addresses == ["644 Gershwin Cir", "489 Manchester St", "112 Steppes Pl"]

    def test_flood_unknown_stations_is_404(self, client):
        assert client.get("/flood/stations", params={"stationNumber": [42]}).status_code == 404

    def test_person_info_last_name(self, client):
        response = client.get("/personInfoLastName", params={"lastName": "BOYD"})
        assert response.status_code == 200
        assert [p["firstName"] for p in response.json()] == ["John", "Jacob"]

    def test_person_info_unknown_is_404(self, client):
        assert client.get("/personInfoLastName", params={"lastName": "Nobody"}).status_code == 404

    def test_community_email(self, client):
        response = client.get("/communityEmail", params={"city": "paris"})
        assert response.json() == ["lily@email.com"]

    def test_missing_medical_record_is_500(self, client):
        client.delete("/medicalrecord", params={"firstName": "John", "lastName": "Boyd"})
        response = client.get("/personInfoLastName", params={"lastName": "Boyd"})
        assert response.status_code == 500
        assert "John Boyd" in response.json()["detail"]
