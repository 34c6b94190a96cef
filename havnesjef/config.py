from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path

_ENV_PREFIX = "HAVNESJEF_"

DEFAULT_CLUSTER_ENDPOINT = "https://34.51.167.42"
DEFAULT_CLUSTER_NAME = "gke_leesah-quiz-dev-5cf6_europe-north2_pleesah"
DEFAULT_CONTEXT_NAME = "pleesah"
DEFAULT_CLUSTER_ROLE = "pleesah-player"
DEFAULT_TOKEN_TTL_SECONDS = 86400
DEFAULT_CLUSTER_CA_DATA = (
    "LS0tLS1CRUdJTiBDRVJUSUZJQ0FURS0tLS0tCk1JSUVMRENDQXBTZ0F3SUJBZ0lRZkkzYzRQQ0tPc3ZhSkNhazRYUXRuekFOQmdrcWhraUc5dzBCQVFzRkFEQXYKTVMwd0t3WURWUVFERXlSa05UY3lZVGhpWXkxa1pUVXdMVFEyWmprdE9EWTROaTAxTnpka1ltTTFPR1JsWXpndwpJQmNOTWpZd01URXpNVEV4TkRNNFdoZ1BNakExTmpBeE1EWXhNakUwTXpoYU1DOHhMVEFyQmdOVkJBTVRKR1ExCk56SmhPR0pqTFdSbE5UQXRORFptT1MwNE5qZzJMVFUzTjJSaVl6VTRaR1ZqT0RDQ0FhSXdEUVlKS29aSWh2Y04KQVFFQkJRQURnZ0dQQURDQ0FZb0NnZ0dCQUp2TEJqbkxVdEttcEtWOTR3cGxlYXhUbkpYZmdxVHY4MmoyK0VpbwpuUEpibFpKdGdxbmJPSTlNaTFVRzQ1YmNCaFNudzFSeFdKSnVyNUUvbzUyNHRVamlWTlBXb1dDYlFpVE9mblNlCnhsdzRMbjFhd3dGVTYzRlNIajNMMGx1M0xhbnBiWWt3NU1NdlE0a2l4NkQvaWtJQmNUS1kzOXJ5TDdrMmVXbUIKK1pNNHFLWElzUDFXM0d4cGpndkgybGRtVE1DMWwwMVhERC9YNmdWK1hBVGRid2NHTFJrb1h4c2VOaDRWam1xSgpqUGF1T0VQeTRvTUtzSjVWbTZZQWxtcGlOLzBTUFdMUDFPZFpub1k0MWlwQlNCQllPRHAwRUNJSDVidWtaNi9hClhZaEpEU0ltemlCUENNNGNObVNaRFlvTHlRUlBuM1cwWFo5UHJId1BUTGtNaE1YdXRNeWJJVTlvcWdvNXpxTTUKWFJzVnJPQ1BLZDdhV0d3UXNoemN4MFc0Z3FpeHcrc1JHYVIyTm94YVcycFhEOWRtQXFVQ0N0YlFOMk01eXppbworRUlGY0VYZmNGRlJJSndFSzRmbXA3bzNIUnhUL3hpNXlPSWgyTDFpVGc5RW9vTnE2OHp6M1pUM2JkZUpuZzRGCnhGUzd5d0tGQkNXa3grZG1lc2s3WWVHOWNRSURBUUFCbzBJd1FEQU9CZ05WSFE4QkFmOEVCQU1DQWdRd0R3WUQKVlIwVEFRSC9CQVV3QXdFQi96QWRCZ05WSFE0RUZnUVU0WW1HZUpVYWhBcFIyV0t3b0dBbFNBcFNnMm93RFFZSgpLb1pJaHZjTkFRRUxCUUFEZ2dHQkFKRCtpZnFLL3dHRXRNMzM4dmJxSUx3WFBwcVRuNm0yTHhDU2owbVhDdXNHCmh4RjJnNnlsMW5EaU5DREVTcmY5a3NVSFFmczNBWng4cE95ak0vMjBPRzZEcllScmt5WVErTEVHem95bUtnd24KSkl4eUhIcGNmZHpHYzI3dXFnSEJ2VzdzQ04vWnFBcjZYUXMwdjhsdXdxd2pibG9TL1VKS3pCN1JOeHArbGVhYQpXSGoxVVFJYnNZZGREUWJFRlBEbk43djBVbVZzT0c2Ukhvd1JyQTRMSldsQmI5OTdweTRzQ0syOFBjR1BlYUEwCmd0UmpDeWN6RmtJR3ppcEE4Mjhab2p1R0VVck9zMnlxK3RYOWFQVGl3Q1E2NTBuS0o5eTVuc05IV09KYksyenMKeGxvbHJzY1ZIQ2ZOZVltZjFqVjR5aWVHK1I5TlYrNXVjWUxZdzdVOW9TZjhPWUFRdEFYNGYwdEJPQzYyZ1lFRgoxRmVsQmxobXlGOWNXcWtTYVFhK1k3RG52RXJFVmdTd01mSmd0WDkvRHpvcWh2VjdtME16R0VnZ1ppam1KV2xJCmZvN01aaVpwSUNOZHRmVmx1WW54N2VJbFFSaDAycVl5MWl1SUV3MnhabFZDTllZdWVodnUwaEs0b2MrdHZib1UKNWRBU2NqLzJkM3lMT0s5WVEzV21TZz09Ci0tLS0tRU5EIENFUlRJRklDQVRFLS0tLS0K"
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ClusterProfile:
    """Where provisioned teams connect to, as written into their kubeconfig."""

    endpoint: str = DEFAULT_CLUSTER_ENDPOINT
    ca_data: str = DEFAULT_CLUSTER_CA_DATA
    name: str = DEFAULT_CLUSTER_NAME
    context_name: str = DEFAULT_CONTEXT_NAME


@dataclass(frozen=True)
class TeamPolicy:
    cluster_role: str = DEFAULT_CLUSTER_ROLE
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    create_coordinates_secret: bool = True


@dataclass(frozen=True)
class Settings:
    kubeconfig: str | None = None
    kube_context: str | None = None
    host: str = "0.0.0.0"
    port: int = 8080
    command_timeout_seconds: float = 30.0
    provision_deadline_seconds: float = 120.0
    cluster: ClusterProfile = field(default_factory=ClusterProfile)
    team: TeamPolicy = field(default_factory=TeamPolicy)


def _env(name: str) -> str | None:
    value = os.getenv(f"{_ENV_PREFIX}{name}")
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{_ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{_ENV_PREFIX}{name} must be positive, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{_ENV_PREFIX}{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{_ENV_PREFIX}{name} must be positive, got {value}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{_ENV_PREFIX}{name} must be a boolean, got {raw!r}")


def default_kubeconfig() -> str | None:
    home = Path.home() if os.getenv("HOME") else None
    if home is None:
        return None
    return str(home / ".kube" / "config")


def load_settings() -> Settings:
    cluster = ClusterProfile(
        endpoint=_env("CLUSTER_ENDPOINT") or DEFAULT_CLUSTER_ENDPOINT,
        ca_data=_env("CLUSTER_CA_DATA") or DEFAULT_CLUSTER_CA_DATA,
        name=_env("CLUSTER_NAME") or DEFAULT_CLUSTER_NAME,
        context_name=_env("CONTEXT_NAME") or DEFAULT_CONTEXT_NAME,
    )
    team = TeamPolicy(
        cluster_role=_env("CLUSTER_ROLE") or DEFAULT_CLUSTER_ROLE,
        token_ttl_seconds=_env_int("TOKEN_TTL_SECONDS", DEFAULT_TOKEN_TTL_SECONDS),
        create_coordinates_secret=_env_bool("CREATE_COORDINATES_SECRET", True),
    )
    return Settings(
        kubeconfig=_env("KUBECONFIG") or default_kubeconfig(),
        kube_context=_env("KUBE_CONTEXT"),
        host=_env("HOST") or "0.0.0.0",
        port=_env_int("PORT", 8080),
        command_timeout_seconds=_env_float("COMMAND_TIMEOUT_SECONDS", 30.0),
        provision_deadline_seconds=_env_float("PROVISION_DEADLINE_SECONDS", 120.0),
        cluster=cluster,
        team=team,
    )
