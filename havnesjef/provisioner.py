from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import json
import logging
from typing import Mapping

from havnesjef.proc import CommandRunner, run_command
from havnesjef.services.errors import TokenIssuanceException
from havnesjef.services.naming import validate_resource_name

logger = logging.getLogger(__name__)

RBAC_API_GROUP = "rbac.authorization.k8s.io"


@dataclass(frozen=True)
class NamespaceResult:
    name: str


@dataclass(frozen=True)
class ServiceAccountResult:
    name: str
    namespace: str


@dataclass(frozen=True)
class IssuedToken:
    service_account: str
    namespace: str
    token: str
    expiration_seconds: int
    issued_at: datetime
    expires_at: datetime

    def __repr__(self) -> str:
        return (
            f"IssuedToken(service_account={self.service_account!r}, namespace={self.namespace!r}, "
            f"expiration_seconds={self.expiration_seconds}, expires_at={self.expires_at.isoformat()})"
        )


@dataclass(frozen=True)
class SecretResult:
    name: str
    namespace: str
    keys: tuple[str, ...]


@dataclass(frozen=True)
class RoleBindingResult:
    name: str
    namespace: str
    subject_kind: str
    subject_name: str
    subject_api_group: str
    role_kind: str
    role_name: str
    role_api_group: str


class KubeAdapter:
    """Adapter for the object creations a team needs, driven through kubectl.

    Every method is a single blocking ``kubectl create`` round-trip. Failures
    surface as ``AdapterCommandError`` (``AlreadyExistsError`` on a name
    collision); nothing is retried or cleaned up here.
    """

    def __init__(
        self,
        *,
        runner: CommandRunner | None = None,
        kubeconfig: str | None = None,
        context: str | None = None,
    ) -> None:
        self._runner = runner
        self._kubeconfig = kubeconfig
        self._context = context

    def _kubectl(self, *args: str) -> list[str]:
        cmd = ["kubectl"]
        if self._kubeconfig:
            cmd.extend(["--kubeconfig", self._kubeconfig])
        if self._context:
            cmd.extend(["--context", self._context])
        cmd.extend(args)
        return cmd

    def create_namespace(self, name: str, *, timeout: float | None = None) -> NamespaceResult:
        validate_resource_name(name, kind="namespace")
        logger.debug("Creating namespace: %s", name)
        run_command(
            self._kubectl("create", "namespace", name),
            runner=self._runner,
            error_message=f"Failed to create namespace {name}",
            timeout=timeout,
        )
        logger.info("Created namespace: %s", name)
        return NamespaceResult(name=name)

    def create_service_account(
        self, name: str, *, namespace: str, timeout: float | None = None
    ) -> ServiceAccountResult:
        validate_resource_name(name, kind="serviceaccount")
        logger.debug("Creating service account '%s' in namespace '%s'", name, namespace)
        run_command(
            self._kubectl("create", "serviceaccount", name, "--namespace", namespace),
            runner=self._runner,
            error_message=f"Failed to create service account {name} in namespace {namespace}",
            timeout=timeout,
        )
        logger.info("Created service account '%s' in namespace '%s'", name, namespace)
        return ServiceAccountResult(name=name, namespace=namespace)

    def create_token(
        self,
        service_account: str,
        *,
        namespace: str,
        ttl_seconds: int,
        timeout: float | None = None,
    ) -> IssuedToken:
        logger.debug(
            "Requesting token for service account '%s' in namespace '%s' (ttl=%ss)",
            service_account,
            namespace,
            ttl_seconds,
        )
        issued_at = datetime.now(timezone.utc)
        result = run_command(
            self._kubectl(
                "create",
                "token",
                service_account,
                "--namespace",
                namespace,
                f"--duration={ttl_seconds}s",
                "--output",
                "json",
            ),
            runner=self._runner,
            error_message=f"Failed to issue token for service account {service_account} in namespace {namespace}",
            timeout=timeout,
        )

        try:
            payload = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise TokenIssuanceException(
                f"Invalid JSON from token request for service account {service_account}"
            ) from exc

        status = payload.get("status", {}) if isinstance(payload, dict) else {}
        token = status.get("token") if isinstance(status, dict) else None
        if not isinstance(token, str) or not token.strip():
            raise TokenIssuanceException(f"Token request for service account {service_account} returned no token")

        expires_at = _parse_timestamp(status.get("expirationTimestamp")) or issued_at + timedelta(seconds=ttl_seconds)
        spec = payload.get("spec", {})
        granted = spec.get("expirationSeconds") if isinstance(spec, dict) else None
        logger.info(
            "Issued token for service account '%s' in namespace '%s' expiring at %s",
            service_account,
            namespace,
            expires_at.isoformat(),
        )
        return IssuedToken(
            service_account=service_account,
            namespace=namespace,
            token=token.strip(),
            expiration_seconds=granted if isinstance(granted, int) else ttl_seconds,
            issued_at=issued_at,
            expires_at=expires_at,
        )

    def create_secret(
        self,
        name: str,
        *,
        namespace: str,
        data: Mapping[str, str],
        timeout: float | None = None,
    ) -> SecretResult:
        logger.debug("Creating secret '%s' in namespace '%s'", name, namespace)
        literals = [f"--from-literal={key}={value}" for key, value in data.items()]
        run_command(
            self._kubectl("create", "secret", "generic", name, "--namespace", namespace, *literals),
            runner=self._runner,
            error_message=f"Failed to create secret {name} in namespace {namespace}",
            timeout=timeout,
        )
        logger.info("Created secret '%s' in namespace '%s'", name, namespace)
        return SecretResult(name=name, namespace=namespace, keys=tuple(data))

    def create_role_binding(
        self,
        name: str,
        *,
        namespace: str,
        group: str,
        cluster_role: str,
        timeout: float | None = None,
    ) -> RoleBindingResult:
        logger.debug(
            "Creating role binding '%s' in namespace '%s' (group=%s clusterrole=%s)",
            name,
            namespace,
            group,
            cluster_role,
        )
        run_command(
            self._kubectl(
                "create",
                "rolebinding",
                name,
                "--namespace",
                namespace,
                f"--clusterrole={cluster_role}",
                f"--group={group}",
            ),
            runner=self._runner,
            error_message=f"Failed to create role binding {name} in namespace {namespace}",
            timeout=timeout,
        )
        logger.info("Created role binding '%s' in namespace '%s'", name, namespace)
        return RoleBindingResult(
            name=name,
            namespace=namespace,
            subject_kind="Group",
            subject_name=group,
            subject_api_group=RBAC_API_GROUP,
            role_kind="ClusterRole",
            role_name=cluster_role,
            role_api_group=RBAC_API_GROUP,
        )


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring unparseable token expiration timestamp: %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
