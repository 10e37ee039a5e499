"""HTTP API tests through the Flask test client (MQTT disabled)."""

from unittest.mock import MagicMock


def _ingest(client, **payload):
    body = {"temperature": 32.0, "humidity": 70.0, "waterLevel": 80, "pumpStatus": False}
    body.update(payload)
    return client.post("/api/sensors", json=body)


class TestEnvelope:
    def test_versioned_and_legacy_paths_match(self, client):
        assert client.get("/api/v1/health").status_code == 200
        assert client.get("/api/health").status_code == 200

    def test_unknown_api_route_is_json_404(self, client):
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.get_json()["ok"] is False

    def test_invalid_json_body_is_400(self, client):
        response = client.post("/api/sensors", data="not json", content_type="application/json")
        assert response.status_code == 400
        assert response.get_json()["error"]["message"] == "Request body must be a JSON object"


class TestHealth:
    def test_health_reports_database_and_mqtt(self, client):
        data = client.get("/api/health").get_json()["data"]
        assert data["status"] == "ok"
        assert data["db"] == "connected"
        assert data["mqtt"] == {"enabled": False}

    def test_health_returns_503_when_database_is_down(self, client, container, monkeypatch):
        monkeypatch.setattr(container.database, "ping", lambda: False)
        response = client.get("/api/health")

        assert response.status_code == 503
        assert response.get_json()["error"]["details"]["db"] == "not connected"


class TestSensors:
    def test_ingest_returns_stored_reading_with_heat_index(self, client):
        response = _ingest(client)

        assert response.status_code == 201
        reading = response.get_json()["data"]["reading"]
        assert reading["temperature"] == 32.0
        assert reading["heat_index"] is not None
        assert response.get_json()["data"]["transition"] is None

    def test_nan_metrics_are_stored_as_null(self, client):
        response = _ingest(client, temperature="nan")
        assert response.get_json()["data"]["reading"]["temperature"] is None

    def test_history_and_latest(self, client):
        _ingest(client, temperature=30.0)
        _ingest(client, temperature=31.0)

        history = client.get("/api/sensors?limit=1").get_json()["data"]
        assert history["count"] == 1
        assert history["readings"][0]["temperature"] == 31.0
        assert client.get("/api/sensors/latest").get_json()["data"]["temperature"] == 31.0

    def test_latest_without_readings_is_404(self, client):
        assert client.get("/api/sensors/latest").status_code == 404

    def test_history_limit_is_bounded(self, client):
        assert client.get("/api/sensors?limit=1000").status_code == 400

    def test_pump_edge_creates_notification_and_session(self, client):
        data = _ingest(client, pumpStatus=True).get_json()["data"]

        assert data["transition"]["kind"] == "PUMP_ON"
        assert client.get("/api/misting/open").get_json()["data"]["status"] == "In Progress"
        assert client.get("/api/notifications/unread-count").get_json()["data"]["count"] == 1

        _ingest(client, pumpStatus=True)
        assert client.get("/api/notifications/unread-count").get_json()["data"]["count"] == 1


class TestMisting:
    def test_start_and_end(self, client):
        started = client.post(
            "/api/misting/start",
            json={"temperature": 33.0, "humidity": 65, "waterLevel": 90, "mistingType": "manual"},
        )
        assert started.status_code == 201
        session = started.get_json()["data"]
        assert session["mode"] == "MANUAL"
        assert session["start_metrics"]["heat_index"] is not None

        ended = client.put(f"/api/misting/end/{session['id']}", json={"temperature": 29.0, "waterLevel": 85})
        assert ended.status_code == 200
        assert ended.get_json()["data"]["status"] == "Completed"

    def test_second_start_is_409(self, client):
        client.post("/api/misting/start", json={"temperature": 33.0})
        assert client.post("/api/misting/start", json={"temperature": 33.0}).status_code == 409

    def test_end_with_unknown_id_is_404_and_keeps_session_open(self, client):
        session = client.post("/api/misting/start", json={"temperature": 33.0}).get_json()["data"]

        response = client.put(f"/api/misting/end/{session['id'] + 1}", json={})

        assert response.status_code == 404
        assert client.get("/api/misting/open").get_json()["data"]["id"] == session["id"]

    def test_invalid_humidity_is_400_with_details(self, client):
        response = client.post("/api/misting/start", json={"humidity": 140})
        assert response.status_code == 400
        assert response.get_json()["error"]["details"][0]["loc"] == ["humidity"]

    def test_listing_endpoints(self, client):
        session = client.post("/api/misting/start", json={"temperature": 33.0}).get_json()["data"]
        client.put(f"/api/misting/end/{session['id']}", json={})

        assert client.get("/api/misting/today").get_json()["data"]["count"] == 1
        assert client.get("/api/misting/all").get_json()["data"]["count"] == 1
        assert client.get("/api/misting/logs").get_json()["data"]["count"] == 1
        assert client.get("/api/misting/open").get_json()["data"] is None


class TestPump:
    def test_manual_on_without_mqtt_reports_unpublished(self, client):
        data = client.post("/api/pump/manual", json={"state": "on"}).get_json()["data"]

        assert data["published"] is False
        assert data["mode"] == "MANUAL"
        assert data["kind"] == "MANUAL_ON"
        assert data["session"]["status"] == "In Progress"

    def test_manual_command_then_matching_reading_notifies_once(self, client):
        client.post("/api/pump/manual", json={"state": "on"})
        _ingest(client, pumpStatus=True)

        notifications = client.get("/api/notifications").get_json()["data"]["notifications"]
        assert [n["kind"] for n in notifications] == ["MANUAL_ON"]

    def test_manual_same_state_is_unchanged(self, client):
        data = client.post("/api/pump/manual", json={"state": "off"}).get_json()["data"]
        assert data["changed"] is False

    def test_manual_rejects_unknown_state(self, client):
        assert client.post("/api/pump/manual", json={"state": "sideways"}).status_code == 400

    def test_auto_publishes_command_when_broker_connected(self, client, container):
        mqtt = MagicMock()
        mqtt.publish.return_value = True
        container.pump_control_service._mqtt = mqtt

        data = client.post("/api/pump/auto", json={}).get_json()["data"]

        assert data["published"] is True
        assert data["kind"] == "AUTO_MODE"
        mqtt.publish.assert_called_once_with(container.config.pump_command_topic, "AUTO")

    def test_status(self, client):
        client.post("/api/pump/manual", json={"state": "on"})
        data = client.get("/api/pump/status").get_json()["data"]

        assert data["pump_on"] is True
        assert data["mode"] == "MANUAL"
        assert data["open_session"] is not None
        assert data["mqtt"] == {"enabled": False}


class TestNotifications:
    def test_mark_read_flow(self, client):
        _ingest(client, pumpStatus=True)
        _ingest(client, pumpStatus=False)
        notifications = client.get("/api/notifications?limit=10").get_json()["data"]["notifications"]
        assert [n["kind"] for n in notifications] == ["PUMP_OFF", "PUMP_ON"]

        assert client.post(f"/api/notifications/mark-read/{notifications[0]['id']}").status_code == 200
        assert client.get("/api/notifications/unread-count").get_json()["data"]["count"] == 1
        assert client.post("/api/notifications/mark-all-read").get_json()["data"]["updated"] == 1

    def test_mark_unknown_is_404(self, client):
        assert client.post("/api/notifications/mark-read/999").status_code == 404

    def test_delete_old(self, client):
        _ingest(client, pumpStatus=True)
        response = client.delete("/api/notifications/old?days=30")
        assert response.get_json()["data"]["deleted"] == 0
        assert client.delete("/api/notifications/old?days=x").status_code == 400


class TestAuthAndUsers:
    def _signup(self, client, email="juan@example.com"):
        return client.post("/auth/signup", json={"name": "Juan", "email": email, "password": "secret123"})

    def test_signup_login_logout(self, client):
        signup = self._signup(client)
        assert signup.status_code == 201
        assert "password_hash" not in signup.get_json()["data"]

        login = client.post("/auth/login", json={"email": "JUAN@example.com", "password": "secret123"})
        assert login.status_code == 200
        with client.session_transaction() as session:
            assert session["user_id"] == signup.get_json()["data"]["id"]

        client.post("/auth/logout")
        with client.session_transaction() as session:
            assert "user_id" not in session

    def test_duplicate_signup_is_409(self, client):
        self._signup(client)
        assert self._signup(client).status_code == 409

    def test_password_over_72_bytes_is_400(self, client):
        response = client.post("/auth/signup", json={"name": "Ana", "email": "ana@example.com", "password": "p" * 100})

        assert response.status_code == 400
        assert response.get_json()["error"]["details"][0]["loc"] == ["password"]

    def test_login_messages(self, client):
        self._signup(client)
        unknown = client.post("/auth/login", json={"email": "who@example.com", "password": "x"})
        wrong = client.post("/auth/login", json={"email": "juan@example.com", "password": "nope"})

        assert unknown.status_code == 401
        assert unknown.get_json()["error"]["message"] == "There is no existing account for this email."
        assert wrong.get_json()["error"]["message"] == "Invalid credentials"

    def test_profile_and_security_update(self, client):
        user_id = self._signup(client).get_json()["data"]["id"]
        self._signup(client, email="maria@example.com")

        assert client.get(f"/api/users/{user_id}").get_json()["data"]["email"] == "juan@example.com"
        assert client.get("/api/users/999").status_code == 404

        denied = client.put(f"/api/users/{user_id}/security", json={"currentPassword": "bad", "newPassword": "abcdef1"})
        assert denied.status_code == 401

        taken = client.put(
            f"/api/users/{user_id}/security", json={"currentPassword": "secret123", "email": "maria@example.com"}
        )
        assert taken.status_code == 409

        updated = client.put(
            f"/api/users/{user_id}/security", json={"currentPassword": "secret123", "newPassword": "secret999"}
        )
        assert updated.status_code == 200
        relogin = client.post("/auth/login", json={"email": "juan@example.com", "password": "secret999"})
        assert relogin.status_code == 200


class TestThermalRecords:
    def test_create_and_search(self, client):
        created = client.post("/api/records", json={"name": "Pig Alpha", "bodyTemp": 39.7})
        assert created.status_code == 201
        assert created.get_json()["data"]["health_status"] == "Elevated"

        data = client.get("/api/records?search=alpha&month=all&year=all").get_json()["data"]
        assert data["count"] == 1

    def test_auto_and_simulated_records(self, client):
        assert client.post("/api/records/auto", json={"avgTemp": 37.6, "maxTemp": 38.4}).get_json()["data"]["name"] == "Auto-detected"
        assert client.post("/api/simulate-scan").status_code == 201
        assert client.get("/api/records").get_json()["data"]["count"] == 2

    def test_auto_record_with_average_only(self, client):
        response = client.post("/api/records/auto", json={"avgTemp": 38.7, "minTemp": 36.0})

        assert response.status_code == 201
        assert response.get_json()["data"]["body_temp"] == "38.7"
        assert response.get_json()["data"]["min_temp"] == "36.0"

    def test_invalid_record_is_400(self, client):
        assert client.post("/api/records", json={"name": "Pig"}).status_code == 400


class TestReports:
    def test_summary_and_comfort(self, client):
        session = client.post("/api/misting/start", json={"temperature": 33.0}).get_json()["data"]
        client.put(f"/api/misting/end/{session['id']}", json={"temperature": 30.0})

        summary = client.get("/api/reports/summary?type=daily").get_json()["data"]
        assert summary["stats"]["total_events"] == 1

        comfort = client.get("/api/reports/comfort").get_json()["data"]
        assert comfort["counts"]["warning"] == 1

    def test_monthly_requires_year(self, client):
        assert client.get("/api/reports/summary?type=monthly&month=6").status_code == 400

    def test_export_is_csv_attachment(self, client):
        response = client.get("/api/reports/export?type=yearly&year=2025")

        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        assert "attachment" in response.headers["Content-Disposition"]


class TestStream:
    def test_stream_starts_with_connected_event(self, client, container):
        response = client.get("/api/stream")

        assert response.status_code == 200
        assert response.mimetype == "text/event-stream"
        first = next(response.iter_encoded())
        assert b"event: connected" in first
        response.close()
