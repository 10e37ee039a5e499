import json
import random
from types import SimpleNamespace

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.domain.exceptions import ValidationError
from app.domain.readings import SensorReading
from app.domain.thermal import AUTO_RECORD_NAME, classify_body_temperature, format_temperature, simulate_scan
from app.enums import ThermalHealthStatus
from app.schemas import ThermalAutoReading, ThermalRecordRequest
from app.services.application.thermal_record_service import ThermalRecordService


@pytest.mark.parametrize(
    "body_temp, status",
    [
        (37.9, ThermalHealthStatus.LOW_TEMP),
        (38.0, ThermalHealthStatus.HEALTHY),
        (39.5, ThermalHealthStatus.HEALTHY),
        (39.7, ThermalHealthStatus.ELEVATED),
        (40.0, ThermalHealthStatus.FEVER_ALERT),
    ],
)
def test_classify_body_temperature(body_temp, status):
    assert classify_body_temperature(body_temp) == status


def test_format_temperature():
    assert format_temperature(38.456) == "38.5"
    assert format_temperature(None) == "N/A"


def test_simulated_scan_is_plausible():
    scan = simulate_scan(random.Random(7))
    assert 37.5 <= scan.body_temp <= 40.5
    assert scan.min_temp < scan.avg_temp < scan.body_temp


@pytest.fixture()
def thermal_service(thermal_repo, sensor_repo):
    return ThermalRecordService(thermal_repo, sensor_repo, rng=random.Random(42))


class TestThermalRecordService:
    def test_create_record_derives_health_status(self, thermal_service):
        record = thermal_service.create_record(
            ThermalRecordRequest.model_validate({"name": "Pig Alpha", "bodyTemp": 40.2, "breed": "Duroc"})
        )

        assert record["health_status"] == "Fever Alert"
        assert record["body_temp"] == "40.2"
        assert record["ambient_temp"] == "N/A"

    def test_list_filters_by_name_or_temperature(self, thermal_service):
        thermal_service.create_record(ThermalRecordRequest(name="Pig Alpha", body_temp=38.5))
        thermal_service.create_record(ThermalRecordRequest(name="Pig Bravo", body_temp=39.9))

        assert thermal_service.list_records(search="bravo")["count"] == 1
        assert thermal_service.list_records(search="38.5")["records"][0]["name"] == "Pig Alpha"
        assert thermal_service.list_records()["count"] == 2

    def test_month_and_year_filters(self, thermal_service, thermal_repo):
        thermal_repo.create({"name": "Old", "body_temp": 38.6, "health_status": "Healthy",
                             "scanned_at": "2023-02-10T08:00:00.000000+00:00"})
        thermal_service.create_record(ThermalRecordRequest(name="New", body_temp=38.6))

        assert [r["name"] for r in thermal_service.list_records(month=2, year=2023)["records"]] == ["Old"]
        assert thermal_service.list_records(month="all", year="all")["count"] == 2

    def test_invalid_month_is_rejected(self, thermal_service):
        with pytest.raises(ValidationError):
            thermal_service.list_records(month="13")

    def test_auto_record_uses_latest_shed_reading(self, thermal_service, sensor_repo):
        sensor_repo.save(SensorReading(temperature=31.0, humidity=72.0, water_level=60, pump_on=False))

        reading = ThermalAutoReading.model_validate({"avg_temp": 37.2, "max_temp": 39.0, "min_temp": 35.1})
        record = thermal_service.record_auto(reading)

        assert record["name"] == AUTO_RECORD_NAME
        assert record["health_status"] == "Healthy"
        assert record["ambient_temp"] == "31.0"
        assert record["humidity"] == "72.0"

    def test_average_only_frame_falls_back_to_average(self, thermal_service):
        record = thermal_service.record_auto(ThermalAutoReading.model_validate({"avgTemp": 38.7}))

        assert record["body_temp"] == "38.7"
        assert record["min_temp"] == "38.7"
        assert record["health_status"] == "Healthy"

    def test_frame_without_average_is_rejected(self):
        with pytest.raises(PydanticValidationError):
            ThermalAutoReading.model_validate({"maxTemp": 39.0})

    def test_mqtt_message_is_stored(self, thermal_service):
        msg = SimpleNamespace(topic="agricool/thermal", payload=json.dumps({"avgTemp": 38.9, "maxTemp": 40.5}).encode())
        thermal_service.handle_mqtt_message(None, None, msg)

        records = thermal_service.list_records()["records"]
        assert records[0]["health_status"] == "Fever Alert"

    def test_malformed_mqtt_message_is_discarded(self, thermal_service):
        thermal_service.handle_mqtt_message(None, None, SimpleNamespace(topic="agricool/thermal", payload=b"not-json"))
        assert thermal_service.list_records()["count"] == 0

    def test_simulate_creates_a_record(self, thermal_service):
        record = thermal_service.simulate()
        assert record["id"] is not None
        assert record["notes"] == "Simulated scan"
