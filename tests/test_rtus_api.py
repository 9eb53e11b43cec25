"""
Integration tests for the RTU and telemetry endpoints (STORY-007, STORY-010).

CHANGELOG:
- 2026-10-14: plant_name is read-only (STORY-021)
- 2026-10-09: Stats endpoint (STORY-016)
- 2026-10-05: Initial creation (STORY-007)

TODO:
- None
"""

import pytest
from fastapi.testclient import TestClient


def _create_rtu(client: TestClient, headers: dict[str, str], **fields) -> dict:
    body = {"name": "Gate RTU", "model": "RTU-1000", "manufacturer": "Siemens", **fields}
    resp = client.post("/api/rtus", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.fixture()
def fleet(client: TestClient, auth_headers: dict[str, str]) -> TestClient:
    """Client with 6 RTUs of mixed status, protocol and battery level."""
    specs = [
        {"status": "active", "communication_protocol": "Modbus", "battery_level": 10},
        {"status": "active", "communication_protocol": "MQTT", "battery_level": 55},
        {"status": "error", "communication_protocol": "Modbus", "battery_level": 90},
        {"status": "maintenance", "communication_protocol": "DNP3", "manufacturer": "ABB"},
        {"status": "inactive", "communication_protocol": "IEC 61850", "battery_level": 100},
        {"status": "active", "communication_protocol": "Modbus", "location": "North Yard"},
    ]
    for i, spec in enumerate(specs):
        _create_rtu(client, auth_headers, name=f"Unit {i}", serial_number=f"SER{i}", **spec)
    return client


class TestListRtus:
    """GET /api/rtus."""

    def test_default_listing(self, fleet: TestClient) -> None:
        body = fleet.get("/api/rtus").json()
        assert body["meta"]["total"] == 6
        assert body["meta"]["limit"] == 20
        assert [r["name"] for r in body["data"]] == [f"Unit {i}" for i in range(6)]

    def test_status_and_protocol(self, fleet: TestClient) -> None:
        body = fleet.get("/api/rtus", params={"status": "active", "protocol": "Modbus"}).json()
        assert [r["name"] for r in body["data"]] == ["Unit 0", "Unit 5"]

    def test_battery_range_excludes_missing(self, fleet: TestClient) -> None:
        body = fleet.get("/api/rtus", params={"minBattery": 50}).json()
        assert [r["name"] for r in body["data"]] == ["Unit 1", "Unit 2", "Unit 4"]

    def test_manufacturer_substring(self, fleet: TestClient) -> None:
        body = fleet.get("/api/rtus", params={"manufacturer": "abb"}).json()
        assert [r["name"] for r in body["data"]] == ["Unit 3"]

    def test_search_covers_serial_and_location(self, fleet: TestClient) -> None:
        assert fleet.get("/api/rtus", params={"q": "ser4"}).json()["meta"]["total"] == 1
        assert fleet.get("/api/rtus", params={"search": "north"}).json()["meta"]["total"] == 1

    def test_pagination(self, fleet: TestClient) -> None:
        body = fleet.get("/api/rtus", params={"page": 2, "limit": 4}).json()
        assert len(body["data"]) == 2
        assert body["meta"]["totalPages"] == 2

    @pytest.mark.parametrize(
        "params",
        [{"protocol": "Telnet"}, {"status": "dead"}, {"limit": 500}, {"page": -1}],
    )
    def test_invalid_params(self, fleet: TestClient, params: dict) -> None:
        assert fleet.get("/api/rtus", params=params).status_code == 400

    def test_stats(self, fleet: TestClient) -> None:
        data = fleet.get("/api/rtus/stats").json()["data"]
        assert data["byStatus"] == {"active": 3, "error": 1, "maintenance": 1, "inactive": 1}
        assert data["byProtocol"]["Modbus"] == 3
        assert data["byManufacturer"] == {"Siemens": 5, "ABB": 1}
        assert data["total"] == 6


class TestRtuCrud:
    """Create, read, update and delete."""

    def test_create_defaults(self, client: TestClient, auth_headers: dict) -> None:
        rtu = _create_rtu(client, auth_headers)
        assert rtu["status"] == "active"
        assert rtu["communication_protocol"] == "Modbus"
        assert rtu["firmware_version"] == "v1.0.0"
        assert rtu["plant_id"] is None

    def test_create_missing_required(self, client: TestClient, auth_headers: dict) -> None:
        resp = client.post("/api/rtus", json={"name": "x"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_create_unknown_plant(self, client: TestClient, auth_headers: dict) -> None:
        resp = client.post(
            "/api/rtus",
            json={"name": "x", "model": "m", "manufacturer": "y", "plant_id": 77},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert "77" in resp.json()["message"]

    def test_patch_null_clears_omitted_keeps(self, client: TestClient, auth_headers: dict) -> None:
        rtu = _create_rtu(client, auth_headers, ip_address="10.1.1.1", port=502, notes="keep")
        resp = client.patch(
            f"/api/rtus/{rtu['id']}",
            json={"ip_address": None, "name": None, "status": "error"},
            headers=auth_headers,
        )
        data = resp.json()["data"]
        assert data["ip_address"] is None
        assert data["port"] == 502
        assert data["notes"] == "keep"
        assert data["name"] == "Gate RTU"
        assert data["status"] == "error"

    def test_plant_name_follows_link_only(self, client: TestClient, auth_headers: dict) -> None:
        plant = client.post(
            "/api/plants", json={"infra": {"name": "Alpha", "type": "solar"}}, headers=auth_headers
        ).json()["data"]
        rtu = _create_rtu(client, auth_headers, plant_id=plant["id"], plant_name="Forged")
        assert rtu["plant_name"] == "Alpha"
        resp = client.patch(
            f"/api/rtus/{rtu['id']}", json={"plant_name": "Bogus"}, headers=auth_headers
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["plant_id"] == plant["id"]
        assert resp.json()["data"]["plant_name"] == "Alpha"

    def test_get_unknown_is_404(self, client: TestClient) -> None:
        assert client.get("/api/rtus/zzzz").status_code == 404

    def test_delete(self, client: TestClient, auth_headers: dict) -> None:
        rtu = _create_rtu(client, auth_headers)
        assert client.delete(f"/api/rtus/{rtu['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/rtus/{rtu['id']}").status_code == 404
        assert client.delete(f"/api/rtus/{rtu['id']}", headers=auth_headers).status_code == 404

    def test_history_recorded(self, client: TestClient, auth_headers: dict) -> None:
        rtu = _create_rtu(client, auth_headers)
        client.patch(f"/api/rtus/{rtu['id']}", json={"notes": "n"}, headers=auth_headers)
        body = client.get("/api/history", params={"entity": "rtu", "recordId": rtu["id"]}).json()
        assert [e["action"] for e in body["data"]] == ["update", "create"]
        assert client.get("/api/history", params={"entity": "device"}).status_code == 400


class TestTelemetryEndpoint:
    """GET /api/rtus/data."""

    def test_all_snapshots(self, client: TestClient) -> None:
        data = client.get("/api/rtus/data").json()["data"]
        assert sorted(data) == ["0001", "0002", "0003", "0004", "0005"]
        for snap in data.values():
            offline = snap["status"] == "offline"
            assert (snap["battery_level"] is None) == offline
            assert (snap["signal_strength"] is None) == offline

    def test_single_snapshot(self, client: TestClient) -> None:
        body = client.get("/api/rtus/data", params={"id": "0003"}).json()
        assert body["data"]["id"] == "0003"
        assert set(body["data"]["values"]) == {"temperature", "humidity", "power", "voltage", "current"}

    def test_unknown_device_is_404(self, client: TestClient) -> None:
        resp = client.get("/api/rtus/data", params={"id": "9999"})
        assert resp.status_code == 404
        assert resp.json()["status"] == "error"

    def test_not_captured_by_rtu_lookup(self, client: TestClient, auth_headers: dict) -> None:
        _create_rtu(client, auth_headers)
        assert client.get("/api/rtus/data").status_code == 200
