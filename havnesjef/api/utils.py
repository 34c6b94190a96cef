import logging

from starlette.requests import Request
from starlette.responses import HTMLResponse

from havnesjef.api.pages import error_page
from havnesjef.proc import AdapterCommandError, AlreadyExistsError
from havnesjef.services.errors import (
    DeadlineExceededException,
    HavnesjefException,
    InvalidTeamNameException,
)

DOMAIN_ERRORS = (HavnesjefException, AdapterCommandError)

ERROR_STATUS = {
    AlreadyExistsError: 409,
    InvalidTeamNameException: 422,
    DeadlineExceededException: 503,
}

GENERIC_ERROR_MESSAGE = "Internal error while creating the team"

logger = logging.getLogger(__name__)


def status_for(exc: Exception) -> int:
    status = ERROR_STATUS.get(type(exc))
    if status is not None:
        return status
    if isinstance(exc, AdapterCommandError) and exc.retryable:
        return 503
    return 500


def _exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled application error for path=%s: %s", request.url.path, exc)
    return HTMLResponse(error_page(team="", error=GENERIC_ERROR_MESSAGE), status_code=500)


def register_exception_handlers(app):
    app.exception_handler(Exception)(_exception_handler)
