from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Callable

from havnesjef.config import ClusterProfile, Settings, TeamPolicy
from havnesjef.provisioner import IssuedToken, KubeAdapter
from havnesjef.services.errors import DeadlineExceededException, HavnesjefException
from havnesjef.services.kubeconfig import build_kubeconfig_spec, render_kubeconfig
from havnesjef.services.naming import service_account_group

logger = logging.getLogger(__name__)

COORDINATES_SECRET_NAME = "koordinatene-mine"
COORDINATES_SECRET_DATA = {"KOORDINATER": "59.9124° N, 10.7962° E"}

STEP_NAMESPACE = "namespace"
STEP_SERVICE_ACCOUNT = "serviceaccount"
STEP_TOKEN = "token"
STEP_SECRET = "secret"
STEP_ROLE_BINDING = "rolebinding"


@dataclass(frozen=True)
class ProvisionedTeam:
    name: str
    steps: tuple[str, ...]
    token: IssuedToken
    kubeconfig: str = field(repr=False)


class TeamProvisioner:
    """Create the namespace, identity and access binding for a new team.

    The sequence is strictly ordered and not transactional: the first failing
    step's exception propagates unchanged and everything created before it
    stays in the cluster.
    """

    def __init__(
        self,
        *,
        kube: KubeAdapter | None = None,
        cluster: ClusterProfile | None = None,
        policy: TeamPolicy | None = None,
        command_timeout: float | None = None,
        deadline: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.kube = kube or KubeAdapter()
        self.cluster = cluster or ClusterProfile()
        self.policy = policy or TeamPolicy()
        self._command_timeout = command_timeout
        self._deadline = deadline
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, *, kube: KubeAdapter | None = None) -> TeamProvisioner:
        return cls(
            kube=kube or KubeAdapter(kubeconfig=settings.kubeconfig, context=settings.kube_context),
            cluster=settings.cluster,
            policy=settings.team,
            command_timeout=settings.command_timeout_seconds,
            deadline=settings.provision_deadline_seconds,
        )

    def provision(self, team_name: str, *, deadline: float | None = None) -> str:
        return self.provision_team(team_name, deadline=deadline).kubeconfig

    def provision_team(self, team_name: str, *, deadline: float | None = None) -> ProvisionedTeam:
        """Run the provisioning steps for ``team_name``.

        ``deadline`` is a budget in seconds for the whole call and replaces the
        configured one. It is checked before every step and caps each command's
        timeout.
        """
        logger.info("Provisioning team '%s'", team_name)
        limit = self._deadline if deadline is None else deadline
        started = self._clock()
        completed: list[str] = []

        def budget(step: str) -> float | None:
            if limit is None:
                return self._command_timeout
            remaining = limit - (self._clock() - started)
            if remaining <= 0:
                raise DeadlineExceededException(
                    f"Provisioning team {team_name} exceeded its {limit}s deadline before step '{step}'"
                )
            if self._command_timeout is None:
                return remaining
            return min(self._command_timeout, remaining)

        try:
            namespace = self.kube.create_namespace(team_name, timeout=budget(STEP_NAMESPACE))
            completed.append(STEP_NAMESPACE)

            service_account = self.kube.create_service_account(
                team_name, namespace=namespace.name, timeout=budget(STEP_SERVICE_ACCOUNT)
            )
            completed.append(STEP_SERVICE_ACCOUNT)
            if not namespace.name == service_account.name == team_name:
                raise HavnesjefException(
                    f"Team resources must share the team name {team_name!r}, got namespace={namespace.name!r} "
                    f"serviceaccount={service_account.name!r}"
                )

            token = self.kube.create_token(
                service_account.name,
                namespace=namespace.name,
                ttl_seconds=self.policy.token_ttl_seconds,
                timeout=budget(STEP_TOKEN),
            )
            completed.append(STEP_TOKEN)

            if self.policy.create_coordinates_secret:
                self.kube.create_secret(
                    COORDINATES_SECRET_NAME,
                    namespace=namespace.name,
                    data=COORDINATES_SECRET_DATA,
                    timeout=budget(STEP_SECRET),
                )
                completed.append(STEP_SECRET)

            self.kube.create_role_binding(
                team_name,
                namespace=namespace.name,
                group=service_account_group(namespace.name),
                cluster_role=self.policy.cluster_role,
                timeout=budget(STEP_ROLE_BINDING),
            )
            completed.append(STEP_ROLE_BINDING)
        except Exception:
            logger.warning(
                "Provisioning team '%s' stopped after steps [%s]; created objects are left in place",
                team_name,
                ", ".join(completed) or "none",
            )
            raise

        kubeconfig = render_kubeconfig(
            build_kubeconfig_spec(self.cluster, team_name=team_name, token=token.token)
        )
        logger.info("Provisioned team '%s' (steps: %s)", team_name, ", ".join(completed))
        return ProvisionedTeam(name=team_name, steps=tuple(completed), token=token, kubeconfig=kubeconfig)
