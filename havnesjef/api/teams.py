from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse

from havnesjef.api.pages import INDEX_PAGE, error_page, kubeconfig_page
from havnesjef.api.utils import DOMAIN_ERRORS, status_for
from havnesjef.services.teams import TeamProvisioner

logger = logging.getLogger(__name__)

router = APIRouter(tags=["teams"])


def get_provisioner(request: Request) -> TeamProvisioner:
    return request.app.state.provisioner


@router.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
    return HTMLResponse(INDEX_PAGE)


@router.post("/", response_class=HTMLResponse)
def create_team(
    team: str = Form(""),
    provisioner: TeamProvisioner = Depends(get_provisioner),
) -> HTMLResponse:
    try:
        kubeconfig = provisioner.provision(team)
    except DOMAIN_ERRORS as exc:
        logger.error("failed creating team '%s': %s", team, exc)
        return HTMLResponse(error_page(team=team, error=str(exc)), status_code=status_for(exc))

    logger.info("Created new team: %s", team)
    return HTMLResponse(kubeconfig_page(team=team, kubeconfig=kubeconfig))


@router.get("/healthz", include_in_schema=False)
def healthz() -> dict[str, str]:
    return {"status": "ok"}
