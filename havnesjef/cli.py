from __future__ import annotations

from dataclasses import asdict, replace
import logging

import typer
import uvicorn
import yaml

from havnesjef.config import Settings, load_settings
from havnesjef.logging_config import configure_logging
from havnesjef.main import create_app
from havnesjef.proc import AdapterCommandError
from havnesjef.services.errors import HavnesjefException
from havnesjef.services.teams import TeamProvisioner

configure_logging()
logger = logging.getLogger(__name__)
app = typer.Typer(help="Havnesjef team provisioning", pretty_exceptions_show_locals=False)


def _settings(*, kubeconfig: str | None = None, context: str | None = None, **overrides) -> Settings:
    try:
        settings = load_settings()
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)
    if kubeconfig is not None:
        overrides["kubeconfig"] = kubeconfig
    if context is not None:
        overrides["kube_context"] = context
    return replace(settings, **{key: value for key, value in overrides.items() if value is not None})


def _exit_for_domain_error(exc: Exception) -> None:
    logger.warning("CLI command failed: %s", exc)
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Interface to bind (default 0.0.0.0)."),
    port: int | None = typer.Option(None, "--port", help="Port to listen on (default 8080)."),
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help="Absolute path to the kubeconfig file."),
    context: str | None = typer.Option(None, "--context", help="kubeconfig context to use."),
) -> None:
    """Run the team sign-up web form."""
    settings = _settings(kubeconfig=kubeconfig, context=context, host=host, port=port)
    logger.info("Running on %s:%s", settings.host, settings.port)
    # uvicorn exits the process itself when the port cannot be bound.
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


@app.command("provision")
def provision(
    team: str,
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help="Absolute path to the kubeconfig file."),
    context: str | None = typer.Option(None, "--context", help="kubeconfig context to use."),
    deadline: float | None = typer.Option(
        None, "--deadline", min=0.001, help="Seconds allowed for the whole provisioning run."
    ),
) -> None:
    """Provision TEAM once and print its kubeconfig."""
    settings = _settings(kubeconfig=kubeconfig, context=context)
    try:
        kubeconfig_text = TeamProvisioner.from_settings(settings).provision(team, deadline=deadline)
    except (HavnesjefException, AdapterCommandError) as e:
        _exit_for_domain_error(e)
    typer.echo(kubeconfig_text, nl=False)


@app.command("show-config")
def show_config() -> None:
    settings = _settings()
    payload = asdict(settings)
    ca_data = payload["cluster"]["ca_data"]
    if len(ca_data) > 32:
        payload["cluster"]["ca_data"] = f"{ca_data[:16]}...{ca_data[-16:]}"
    typer.echo(yaml.safe_dump(payload, sort_keys=False), nl=False)


if __name__ == "__main__":
    app()
