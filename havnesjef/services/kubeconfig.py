from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import yaml

from havnesjef.config import ClusterProfile


@dataclass(frozen=True)
class KubeconfigSpec:
    cluster_endpoint: str
    ca_data: str
    cluster_name: str
    context_name: str
    namespace: str
    user_name: str
    user_token: str


def build_kubeconfig_spec(cluster: ClusterProfile, *, team_name: str, token: str) -> KubeconfigSpec:
    # Namespace and user are both the team name.
    return KubeconfigSpec(
        cluster_endpoint=cluster.endpoint,
        ca_data=cluster.ca_data,
        cluster_name=cluster.name,
        context_name=cluster.context_name,
        namespace=team_name,
        user_name=team_name,
        user_token=token,
    )


def kubeconfig_document(spec: KubeconfigSpec) -> dict[str, Any]:
    if not spec.user_token or not spec.user_token.strip():
        raise ValueError("kubeconfig requires a non-empty user token")
    return {
        "apiVersion": "v1",
        "clusters": [
            {
                "cluster": {
                    "certificate-authority-data": spec.ca_data,
                    "server": spec.cluster_endpoint,
                },
                "name": spec.cluster_name,
            }
        ],
        "contexts": [
            {
                "context": {
                    "cluster": spec.cluster_name,
                    "namespace": spec.namespace,
                    "user": spec.user_name,
                },
                "name": spec.context_name,
            }
        ],
        "current-context": spec.context_name,
        "kind": "Config",
        "preferences": {},
        "users": [
            {
                "name": spec.user_name,
                "user": {"token": spec.user_token},
            }
        ],
    }


def render_kubeconfig(spec: KubeconfigSpec) -> str:
    """Serialize ``spec`` into a self-contained kubeconfig file."""
    return yaml.safe_dump(kubeconfig_document(spec), sort_keys=False, default_flow_style=False, width=10_000)
