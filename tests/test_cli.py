from __future__ import annotations

import json
import sys

import pytest
from typer.testing import CliRunner

from cli.main import app
from core.client import ApiClient
from core.domain.errors import TransportError
from conftest import FakeTransport

ME = {"total_results": 1, "results": [{"login": "jdoe"}]}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def fake_client(monkeypatch):
    """Sustituye el transporte HTTP de la CLI por uno en memoria."""

    monkeypatch.delenv("INAT_QUEUE_API_TOKEN", raising=False)
    transport = FakeTransport()

    def _factory(settings):
        return ApiClient(settings, transport=transport)

    monkeypatch.setattr("cli.main.ApiClient", _factory)
    return transport


def test_place_types(runner):
    result = runner.invoke(app, ["place-types"])
    assert result.exit_code == 0
    assert "Municipality" in result.stdout
    assert "1000" in result.stdout


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("id,login", "(id:!t,login:!t)"),
        ('{"id": 1, "user": {"login": 1}}', "(id:!t,user:(login:!t))"),
        ('["a", "b"]', "(a:!t,b:!t)"),
    ],
)
def test_encode_fields(runner, value, expected):
    result = runner.invoke(app, ["encode-fields", value])
    assert result.exit_code == 0
    assert result.stdout.strip() == expected


def test_encode_fields_rejects_unsupported_json(runner):
    result = runner.invoke(app, ["encode-fields", "[[1]]"])
    assert result.exit_code != 0


def test_get_prints_json(runner, fake_client):
    result = runner.invoke(app, ["get", "v2", "observations", "-p", "taxon_id=3", "--fields", "id"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "url": "https://api.inaturalist.org/v2/observations?taxon_id=3&fields=(id:!t)"
    }


def test_get_rejects_bad_param(runner, fake_client):
    result = runner.invoke(app, ["get", "v1", "observations", "-p", "taxon_id"])
    assert result.exit_code != 0
    assert fake_client.calls == []


def test_get_reports_transport_errors(runner, fake_client):
    fake_client.responder = lambda *a: TransportError("error", "Internal Server Error", status_code=500)
    result = runner.invoke(app, ["get", "v1", "observations"])
    assert result.exit_code == 1


def test_whoami(runner, fake_client):
    fake_client.responder = lambda *a: ME
    result = runner.invoke(app, ["whoami", "--token", "jwt"])
    assert result.exit_code == 0, result.output
    assert "jdoe" in result.stdout
    assert fake_client.calls[0].headers["Authorization"] == "jwt"


def test_whoami_without_token(runner, fake_client):
    result = runner.invoke(app, ["whoami"])
    assert result.exit_code == 1
    assert "No token" in result.stdout
    assert fake_client.calls == []


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="XDG config dir")
def test_doctor_setup_token_writes_user_env(runner, monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    result = runner.invoke(app, ["doctor", "setup-token"], input="jwt-secret\n")

    assert result.exit_code == 0, result.output
    env_file = tmp_path / "inat-queue" / ".env"
    assert "INAT_QUEUE_API_TOKEN=jwt-secret" in env_file.read_text(encoding="utf-8")
