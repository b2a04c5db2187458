"""
End-to-end tests — every HTTP cycle through the app becomes one page_requests row.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from pagelog.api import create_app, create_server
from pagelog.core.errors import ConfigError, NotificationError
from pagelog.core.events import REQUEST_COMPLETED
from pagelog.core.settings import PagelogSettings, get_settings
from pagelog.observability import EventRecorder, LogSubscriber


# ── Composition ──────────────────────────────────────────────────────────


class TestComposition:
    def test_subscribers_registered(self, app):
        kinds = [type(s) for s in app.state.subscribers]
        assert kinds == [EventRecorder]
        assert app.state.notifier.listening(REQUEST_COMPLETED)

    def test_log_subscriber_optional(self, engine):
        settings = PagelogSettings(_env_file=None, database_url="sqlite:///:memory:")
        app = create_app(settings, engine=engine)
        assert [type(s) for s in app.state.subscribers] == [EventRecorder, LogSubscriber]

    def test_each_app_has_its_own_notifier(self, engine, settings):
        assert create_app(settings, engine=engine).state.notifier is not create_app(
            settings, engine=engine
        ).state.notifier

    def test_shutdown_unregisters(self, app):
        with TestClient(app):
            pass
        assert app.state.notifier.subscription_count == 0
        assert all(not s.registered for s in app.state.subscribers)


# ── Recording ────────────────────────────────────────────────────────────


class TestRecording:
    def test_html_index_recorded(self, client, all_rows):
        response = client.get("/page_requests")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")

        (row,) = all_rows()
        assert row.status == 200
        assert row.http_method == "GET"
        assert row.path == "/page_requests"
        assert row.http_format == "html"
        assert row.controller_name == "page_requests"
        assert row.action_name == "index"
        assert row.duration >= 0
        assert row.view_runtime is not None
        assert row.db_runtime is not None

    def test_json_format_recorded(self, client, all_rows):
        response = client.get("/page_requests", params={"format": "json"})
        assert response.status_code == 200
        assert response.json() == []
        assert all_rows()[0].http_format == "json"

    def test_accept_header_selects_json(self, client, all_rows):
        client.get("/page_requests", headers={"Accept": "application/json"})
        assert all_rows()[0].http_format == "json"

    def test_redirect_has_no_runtimes(self, client, all_rows):
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/page_requests"

        (row,) = all_rows()
        assert row.status == 302
        assert row.controller_name == "home"
        assert row.action_name == "index"
        assert row.view_runtime is None
        assert row.db_runtime is None

    def test_unrouted_path_recorded(self, client, all_rows):
        assert client.get("/nowhere").status_code == 404
        (row,) = all_rows()
        assert row.status == 404
        assert row.path == "/nowhere"
        assert row.controller_name is None
        assert row.action_name is None

    def test_one_row_per_request(self, client, count_rows):
        for _ in range(3):
            client.get("/health/live")
        assert count_rows() == 3

    def test_transaction_id_is_request_id(self, app, client):
        seen = []
        app.state.notifier.subscribe(REQUEST_COMPLETED, seen.append)
        response = client.get("/health/live", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"
        assert seen[0].transaction_id == "req-123"

    def test_request_sees_earlier_records(self, client):
        client.get("/health/live")
        body = client.get("/page_requests?format=json").json()
        assert [item["path"] for item in body] == ["/health/live"]
        assert body[0]["controller_name"] == "health"
        assert body[0]["action_name"] == "liveness"

    def test_recording_disabled(self, engine, count_rows):
        settings = PagelogSettings(
            _env_file=None,
            database_url="sqlite:///:memory:",
            record_requests=False,
            log_requests=False,
        )
        with TestClient(create_app(settings, engine=engine)) as client:
            assert client.get("/health/live").status_code == 200
        assert count_rows() == 0


# ── Failures ─────────────────────────────────────────────────────────────


class TestFailures:
    def test_endpoint_error_recorded_as_500(self, app, all_rows):
        @app.get("/boom")
        def boom():
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["detail"] == "An unexpected error occurred."

        (row,) = all_rows()
        assert row.status == 500
        assert row.action_name == "boom"

    def test_debug_exposes_detail(self, engine):
        settings = PagelogSettings(_env_file=None, database_url="sqlite:///:memory:", debug=True)
        app = create_app(settings, engine=engine)

        @app.get("/boom")
        def boom():
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            assert client.get("/boom").json()["detail"] == "kaboom"

    def test_subscriber_failure_surfaces(self, app, count_rows):
        def broken(event):
            raise RuntimeError("subscriber down")

        app.state.notifier.subscribe(REQUEST_COMPLETED, broken)
        with TestClient(app) as client:
            with pytest.raises(NotificationError):
                client.get("/health/live")
        # The recorder is isolated from the broken subscriber.
        assert count_rows() == 1

    def test_subscriber_failure_does_not_change_response(self, app):
        def broken(event):
            raise RuntimeError("subscriber down")

        app.state.notifier.subscribe(REQUEST_COMPLETED, broken)
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_write_failure_surfaces(self, app, monkeypatch, count_rows):
        recorder = app.state.subscribers[0]
        monkeypatch.setattr(recorder, "_session_factory", _broken_session_factory)
        with TestClient(app) as client:
            with pytest.raises(NotificationError) as exc_info:
                client.get("/health/live")
        assert "RecordWriteError" in repr(exc_info.value.failures)
        assert count_rows() == 0


def _broken_session_factory() -> Session:
    # Valid engine, but no page_requests table: the INSERT fails.
    return Session(bind=create_engine("sqlite://"))


# ── Read-only views ──────────────────────────────────────────────────────


class TestPageRequestViews:
    def test_show_json(self, client):
        client.get("/health/live")
        body = client.get("/page_requests/1", params={"format": "json"}).json()
        assert body["id"] == 1
        assert body["path"] == "/health/live"
        assert body["status"] == 200
        assert "created_at" in body

    def test_show_html(self, client):
        client.get("/health/live")
        response = client.get("/page_requests/1")
        assert response.status_code == 200
        assert "(200) GET &#x27;/health/live&#x27; to health#liveness" in response.text

    def test_show_missing(self, client, all_rows):
        response = client.get("/page_requests/999")
        assert response.status_code == 404
        assert response.json()["title"] == "Not Found"

        (row,) = all_rows()
        assert row.status == 404
        assert row.action_name == "show"
        assert row.view_runtime is None

    def test_index_newest_first_and_limit(self, client):
        for path in ("/health/live", "/", "/nowhere"):
            client.get(path, follow_redirects=False)
        body = client.get("/page_requests", params={"format": "json", "limit": 2}).json()
        assert [item["path"] for item in body] == ["/nowhere", "/"]

    def test_html_escapes_values(self, app, client):
        EventRecorder(app.state.session_factory).record({"path": "/<script>"}, 1.0)
        text = client.get("/page_requests").text
        assert "<script>" not in text
        assert "/&lt;script&gt;" in text

    def test_no_write_endpoints(self, client):
        assert client.post("/page_requests", json={}).status_code == 405


# ── Server factory ───────────────────────────────────────────────────────


class TestCreateServer:
    @pytest.fixture(autouse=True)
    def _fresh_settings(self):
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    @pytest.mark.parametrize("url", ["sqlite://", "sqlite:///:memory:"])
    def test_rejects_in_memory_database(self, monkeypatch, url):
        monkeypatch.setenv("PAGELOG_DATABASE_URL", url)
        with pytest.raises(ConfigError) as exc_info:
            create_server()
        assert exc_info.value.context.metadata["database_url"] == url

    def test_builds_app_for_file_database(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PAGELOG_DATABASE_URL", f"sqlite:///{tmp_path / 'server.db'}")
        monkeypatch.setenv("PAGELOG_LOG_JSON", "true")
        app = create_server()
        with TestClient(app) as client:
            assert client.get("/health/live").status_code == 200
        app.state.engine.dispose()
