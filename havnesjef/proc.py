from __future__ import annotations

from dataclasses import dataclass
import subprocess
from typing import Callable, Literal

ErrorCategory = Literal["retryable", "fatal"]
CommandRunner = Callable[[list[str], float | None], subprocess.CompletedProcess[str]]

_RETRYABLE_PATTERNS = (
    "timed out",
    "timeout",
    "temporarily unavailable",
    "connection refused",
    "connection reset",
    "i/o timeout",
    "tls handshake timeout",
    "context deadline exceeded",
    "unable to connect",
    "too many requests",
    "rate limit",
)

_ALREADY_EXISTS_PATTERNS = (
    "(alreadyexists)",
    "already exists",
)

# Exit code reported for commands killed after exceeding their timeout.
TIMEOUT_RETURNCODE = -9
# Shell convention for a command that could not be executed at all.
NOT_EXECUTABLE_RETURNCODE = 127


@dataclass(frozen=True)
class CommandResult:
    command: list[str]
    returncode: int
    stdout: str
    stderr: str


class AdapterCommandError(RuntimeError):
    def __init__(
        self,
        *,
        message: str,
        result: CommandResult,
        category: ErrorCategory,
    ) -> None:
        self.result = result
        self.category = category
        super().__init__(self._build_message(message))

    @property
    def retryable(self) -> bool:
        return self.category == "retryable"

    def _build_message(self, message: str) -> str:
        detail = (self.result.stderr or self.result.stdout).strip()
        if len(detail) > 400:
            detail = f"{detail[:397]}..."
        return f"{message} (category={self.category}, returncode={self.result.returncode}, detail={detail!r})"


class AlreadyExistsError(AdapterCommandError):
    """The control plane refused to create an object whose name is taken."""


def default_runner(command: list[str], timeout: float | None = None) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(command, capture_output=True, text=True, check=False, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        stdout = exc.stdout.decode() if isinstance(exc.stdout, bytes) else exc.stdout
        return subprocess.CompletedProcess(
            args=command,
            returncode=TIMEOUT_RETURNCODE,
            stdout=stdout or "",
            stderr=f"command timed out after {timeout}s",
        )
    except OSError as exc:
        return subprocess.CompletedProcess(
            args=command,
            returncode=NOT_EXECUTABLE_RETURNCODE,
            stdout="",
            stderr=f"cannot execute {command[0]}: {exc.strerror or exc}",
        )


def classify_error(*, returncode: int, stderr: str, stdout: str) -> ErrorCategory:
    if returncode < 0:
        return "retryable"
    text = f"{stderr}\n{stdout}".lower()
    if any(pattern in text for pattern in _RETRYABLE_PATTERNS):
        return "retryable"
    return "fatal"


def is_already_exists(*, stderr: str, stdout: str) -> bool:
    text = f"{stderr}\n{stdout}".lower()
    return any(pattern in text for pattern in _ALREADY_EXISTS_PATTERNS)


def run_command(
    command: list[str],
    *,
    runner: CommandRunner | None = None,
    error_message: str,
    timeout: float | None = None,
) -> CommandResult:
    active_runner = runner or default_runner
    completed = active_runner(command, timeout)
    result = CommandResult(
        command=command,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    if result.returncode != 0:
        if is_already_exists(stderr=result.stderr, stdout=result.stdout):
            raise AlreadyExistsError(message=error_message, result=result, category="fatal")
        raise AdapterCommandError(
            message=error_message,
            result=result,
            category=classify_error(
                returncode=result.returncode,
                stderr=result.stderr,
                stdout=result.stdout,
            ),
        )
    return result
