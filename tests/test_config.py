from __future__ import annotations

import logging

import pytest

from havnesjef.config import (
    DEFAULT_CLUSTER_ROLE,
    DEFAULT_TOKEN_TTL_SECONDS,
    Settings,
    load_settings,
)
from havnesjef.logging_config import resolve_level

_ENV = (
    "HAVNESJEF_KUBECONFIG",
    "HAVNESJEF_KUBE_CONTEXT",
    "HAVNESJEF_PORT",
    "HAVNESJEF_CLUSTER_ENDPOINT",
    "HAVNESJEF_CLUSTER_ROLE",
    "HAVNESJEF_TOKEN_TTL_SECONDS",
    "HAVNESJEF_CREATE_COORDINATES_SECRET",
    "HAVNESJEF_COMMAND_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_the_shared_cluster(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))

    settings = load_settings()

    assert settings.port == 8080
    assert settings.kubeconfig == str(tmp_path / ".kube" / "config")
    assert settings.kube_context is None
    assert settings.team.cluster_role == DEFAULT_CLUSTER_ROLE == "pleesah-player"
    assert settings.team.token_ttl_seconds == DEFAULT_TOKEN_TTL_SECONDS == 86400
    assert settings.team.create_coordinates_secret is True
    assert settings.cluster.endpoint == "https://34.51.167.42"
    assert settings.cluster.ca_data.startswith("LS0tLS1CRUdJTiBDRVJUSUZJQ0FURS0tLS0t")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("HAVNESJEF_KUBECONFIG", "/etc/kube.conf")
    monkeypatch.setenv("HAVNESJEF_PORT", "9090")
    monkeypatch.setenv("HAVNESJEF_CLUSTER_ENDPOINT", "https://k8s.example")
    monkeypatch.setenv("HAVNESJEF_CREATE_COORDINATES_SECRET", "off")
    monkeypatch.setenv("HAVNESJEF_COMMAND_TIMEOUT_SECONDS", "2.5")

    settings = load_settings()

    assert settings.kubeconfig == "/etc/kube.conf"
    assert settings.port == 9090
    assert settings.cluster.endpoint == "https://k8s.example"
    assert settings.team.create_coordinates_secret is False
    assert settings.command_timeout_seconds == 2.5


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("HAVNESJEF_TOKEN_TTL_SECONDS", "a day", "must be an integer"),
        ("HAVNESJEF_TOKEN_TTL_SECONDS", "0", "must be positive"),
        ("HAVNESJEF_CREATE_COORDINATES_SECRET", "maybe", "must be a boolean"),
        ("HAVNESJEF_COMMAND_TIMEOUT_SECONDS", "soon", "must be a number"),
    ],
)
def test_malformed_values_name_the_variable(monkeypatch, name, value, message):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=f"{name} {message}"):
        load_settings()


def test_settings_are_immutable():
    settings = Settings()
    with pytest.raises(AttributeError):
        settings.port = 1  # type: ignore[misc]


def test_log_level_resolution(monkeypatch):
    monkeypatch.setenv("HAVNESJEF_LOG_LEVEL", "debug")
    assert resolve_level(None) == logging.DEBUG
    assert resolve_level("warning") == logging.WARNING
    assert resolve_level("nonsense") == logging.INFO
    assert resolve_level(logging.ERROR) == logging.ERROR
