"""NGINX config test and reload through external commands."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence

from nxsite_common import NxsiteConfig
from nxsite.errors import ExternalCommandFailedError, Stage

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


Runner = Callable[[Sequence[str]], CommandResult]


def run_external(cmd: Sequence[str]) -> CommandResult:
    """Run *cmd* once, synchronously, capturing its output. Never raises."""
    log.debug("running: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            list(cmd),
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        return CommandResult(returncode=127, stderr=str(exc))
    return CommandResult(result.returncode, result.stdout, result.stderr)


class NginxGateway:
    """Config-test and reload commands, with a swappable runner."""

    def __init__(
        self,
        test_command: Sequence[str],
        reload_command: Sequence[str],
        runner: Runner = run_external,
    ):
        self.test_command = list(test_command)
        self.reload_command = list(reload_command)
        self._runner = runner

    @classmethod
    def from_config(cls, cfg: NxsiteConfig, runner: Runner = run_external) -> NginxGateway:
        return cls(cfg.test_command, cfg.reload_command, runner=runner)

    def test_config(self, message: str = "Nginx configuration test failed. Details:") -> None:
        """Run nginx -t. Raises ExternalCommandFailedError carrying stderr on failure."""
        result = self._runner(self.test_command)
        if not result.ok:
            raise ExternalCommandFailedError(
                Stage.TEST, message, result.stderr.strip(), returncode=result.returncode
            )

    def reload(self) -> None:
        result = self._runner(self.reload_command)
        if not result.ok:
            raise ExternalCommandFailedError(
                Stage.RELOAD,
                f"Failed to reload Nginx (exit status {result.returncode}).",
                result.stderr.strip(),
                returncode=result.returncode,
            )
