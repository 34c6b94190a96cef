from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
import subprocess

import pytest
from starlette.testclient import TestClient
from typer.testing import CliRunner

from havnesjef.config import ClusterProfile, Settings, TeamPolicy
from havnesjef.main import create_app
from havnesjef.provisioner import KubeAdapter
from havnesjef.services.teams import TeamProvisioner

_GLOBAL_FLAGS = ("--kubeconfig", "--context")
_PLURALS = {
    "namespace": "namespaces",
    "serviceaccount": "serviceaccounts",
    "secret": "secrets",
    "rolebinding": "rolebindings.rbac.authorization.k8s.io",
}


def _result(*, args: list[str], returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=args, returncode=returncode, stdout=stdout, stderr=stderr)


class FakeCluster:
    """In-memory stand-in for ``kubectl create`` against an empty cluster."""

    def __init__(self) -> None:
        self.now = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)
        self.calls: list[list[str]] = []
        self.timeouts: list[float | None] = []
        self.objects: dict[tuple[str, str, str], dict] = {}
        self.tokens: list[dict] = []
        self.failures: dict[str, str] = {}

    def __call__(self, cmd: list[str], timeout: float | None = None) -> subprocess.CompletedProcess[str]:
        self.calls.append(cmd)
        self.timeouts.append(timeout)
        args = _strip_global_flags(cmd[1:])
        if args[0] != "create":
            raise AssertionError(f"unexpected command: {cmd}")

        kind = args[1]
        if kind in self.failures:
            return _result(args=cmd, returncode=1, stderr=self.failures[kind])

        positional = [arg for arg in args[2:] if not arg.startswith("-")]
        options = _options(args[2:])
        namespace = options.get("--namespace", "")

        if kind == "namespace":
            return self._create(cmd, "namespace", "", positional[0], {})
        if not self.exists("namespace", "", namespace):
            return _result(args=cmd, returncode=1, stderr=f'error: failed to create {kind}: namespaces "{namespace}" not found')

        if kind == "serviceaccount":
            return self._create(cmd, "serviceaccount", namespace, positional[0], {})
        if kind == "token":
            return self._token(cmd, namespace, positional[0], options)
        if kind == "secret":
            data = dict(literal.split("=", 1) for literal in options.get("--from-literal", []))
            return self._create(cmd, "secret", namespace, positional[1], {"type": positional[0], "data": data})
        if kind == "rolebinding":
            spec = {"clusterrole": options["--clusterrole"], "group": options["--group"]}
            return self._create(cmd, "rolebinding", namespace, positional[0], spec)
        raise AssertionError(f"unexpected command: {cmd}")

    def exists(self, kind: str, namespace: str, name: str) -> bool:
        return (kind, namespace, name) in self.objects

    def kinds(self) -> list[str]:
        return [kind for kind, _, _ in self.objects]

    def _create(self, cmd: list[str], kind: str, namespace: str, name: str, spec: dict):
        if self.exists(kind, namespace, name):
            return _result(
                args=cmd,
                returncode=1,
                stderr=f'error: failed to create {kind}: {_PLURALS[kind]} "{name}" already exists',
            )
        self.objects[(kind, namespace, name)] = spec
        return _result(args=cmd, returncode=0, stdout=f"{kind}/{name} created")

    def _token(self, cmd: list[str], namespace: str, service_account: str, options: dict):
        if not self.exists("serviceaccount", namespace, service_account):
            return _result(
                args=cmd,
                returncode=1,
                stderr=f'error: failed to create token: serviceaccounts "{service_account}" not found',
            )
        seconds = int(options["--duration"].rstrip("s"))
        token = f"token-{namespace}-{len(self.tokens) + 1}"
        self.tokens.append({"serviceAccount": service_account, "namespace": namespace, "expirationSeconds": seconds})
        payload = {
            "kind": "TokenRequest",
            "apiVersion": "authentication.k8s.io/v1",
            "metadata": {"name": service_account, "namespace": namespace},
            "spec": {"audiences": ["https://kubernetes.default.svc"], "expirationSeconds": seconds},
            "status": {
                "token": token,
                "expirationTimestamp": (self.now + timedelta(seconds=seconds)).strftime("%Y-%m-%dT%H:%M:%SZ"),
            },
        }
        return _result(args=cmd, returncode=0, stdout=json.dumps(payload))


def _strip_global_flags(args: list[str]) -> list[str]:
    stripped: list[str] = []
    skip = False
    for arg in args:
        if skip:
            skip = False
            continue
        if arg in _GLOBAL_FLAGS:
            skip = True
            continue
        stripped.append(arg)
    return stripped


def _options(args: list[str]) -> dict:
    options: dict = {"--from-literal": []}
    iterator = iter(args)
    for arg in iterator:
        if not arg.startswith("--"):
            continue
        if "=" in arg:
            key, value = arg.split("=", 1)
        else:
            key, value = arg, next(iterator)
        if key == "--from-literal":
            options[key].append(value)
        else:
            options[key] = value
    return options


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        kubeconfig=None,
        cluster=ClusterProfile(
            endpoint="https://cluster.example.test",
            ca_data="Q0EtREFUQQ==",
            name="test-cluster",
            context_name="test-context",
        ),
        team=TeamPolicy(),
    )


@pytest.fixture
def provisioner(cluster, settings) -> TeamProvisioner:
    return TeamProvisioner.from_settings(settings, kube=KubeAdapter(runner=cluster))


@pytest.fixture
def client(settings, provisioner):
    app = create_app(settings, provisioner=provisioner)
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def cli_runner(monkeypatch, cluster):
    monkeypatch.setenv("HAVNESJEF_KUBECONFIG", "/tmp/test-kubeconfig")
    monkeypatch.setattr("havnesjef.proc.default_runner", cluster)

    import havnesjef.cli as cli

    return CliRunner(), cli.app
