from __future__ import annotations

from fastapi import FastAPI

from havnesjef.api import teams
from havnesjef.api.utils import register_exception_handlers
from havnesjef.config import Settings, load_settings
from havnesjef.services.teams import TeamProvisioner


def create_app(
    settings: Settings | None = None,
    *,
    provisioner: TeamProvisioner | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(
        title="Havnesjef",
        description="Self-service team workspaces: a namespace, service account and kubeconfig per team",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.provisioner = provisioner or TeamProvisioner.from_settings(settings)

    app.include_router(teams.router)
    register_exception_handlers(app)
    return app


app = create_app()
