"""Tests for the HTTP transport."""

import pytest

from cloudhealth_perspectives.errors import TransportFailure, UnparseableResponse
from cloudhealth_perspectives.transport.client import parse_confirmation, validate_perspective_id
from cloudhealth_perspectives.transport.config import DEFAULT_API_URL, ApiConfig

from fakes import API_URL, FakeResponse


class TestParseConfirmation:
    def test_extracts_id(self):
        assert parse_confirmation("Perspective 4821 created") == "4821"

    def test_id_inside_longer_body(self):
        assert parse_confirmation('{"message": "Perspective 77 created"}') == "77"

    def test_unrecognised_body_is_hard_failure(self):
        with pytest.raises(UnparseableResponse) as exc_info:
            parse_confirmation("Created OK")
        assert exc_info.value.value == "Created OK"

    def test_missing_digits(self):
        with pytest.raises(UnparseableResponse):
            parse_confirmation("Perspective  created")


class TestValidatePerspectiveId:
    def test_accepts_digits(self):
        assert validate_perspective_id("4821") == "4821"

    @pytest.mark.parametrize("bad", ["", "12a", "../1", "1 ", "-5"])
    def test_rejects_non_digits(self, bad):
        with pytest.raises(ValueError):
            validate_perspective_id(bad)


class TestApiConfig:
    def test_from_env_defaults(self, monkeypatch):
        monkeypatch.setenv("CHT_API_KEY", "k")
        monkeypatch.delenv("CHT_API_URL", raising=False)
        monkeypatch.delenv("CHT_TIMEOUT", raising=False)
        config = ApiConfig.from_env()
        assert config.api_key == "k"
        assert config.url == DEFAULT_API_URL
        assert config.timeout == 30.0

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CHT_API_KEY", "k")
        monkeypatch.setenv("CHT_API_URL", "https://example.test/api/")
        monkeypatch.setenv("CHT_TIMEOUT", "2.5")
        config = ApiConfig.from_env()
        assert config.perspective_url("12") == "https://example.test/api/12"
        assert config.timeout == 2.5

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("CHT_API_KEY", raising=False)
        with pytest.raises(ValueError, match="CHT_API_KEY"):
            ApiConfig.from_env()

    def test_bad_timeout(self, monkeypatch):
        monkeypatch.setenv("CHT_API_KEY", "k")
        monkeypatch.setenv("CHT_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="CHT_TIMEOUT"):
            ApiConfig.from_env()


class TestPerspectiveClient:
    def test_create_posts_body_with_api_key(self, client, server):
        text = client.create(b'{"name": "P"}')
        assert text == "Perspective 4821 created"
        method, url, params, data = server.requests[-1]
        assert (method, url) == ("POST", API_URL)
        assert params == {"api_key": "secret-key"}
        assert data == b'{"name": "P"}'

    def test_fetch_returns_bytes(self, client, server):
        server.documents["12"] = {"name": "P"}
        assert client.fetch("12") == b'{"name": "P"}'
        assert server.requests[-1][:2] == ("GET", f"{API_URL}/12")

    def test_replace_and_remove(self, client, server):
        server.documents["12"] = {"name": "P"}
        client.replace("12", b'{"name": "Q"}')
        assert server.documents["12"] == {"name": "Q"}
        client.remove("12")
        assert "12" not in server.documents
        assert [r[0] for r in server.requests] == ["PUT", "DELETE"]

    def test_non_2xx_raises_with_status_and_body(self, client, server):
        server.fail_with = FakeResponse(403, "Invalid API key")
        with pytest.raises(TransportFailure) as exc_info:
            client.fetch("12")
        assert exc_info.value.status_code == 403
        assert exc_info.value.body == "Invalid API key"

    def test_not_found(self, client):
        with pytest.raises(TransportFailure) as exc_info:
            client.remove("99")
        assert exc_info.value.status_code == 404

    def test_connection_error_wrapped(self, client, server, connection_error):
        server.raise_error = connection_error
        with pytest.raises(TransportFailure) as exc_info:
            client.fetch("12")
        assert exc_info.value.status_code is None
        assert exc_info.value.__cause__ is connection_error

    def test_invalid_id_rejected_before_request(self, client, server):
        with pytest.raises(ValueError):
            client.fetch("abc")
        assert server.requests == []
