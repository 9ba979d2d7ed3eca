"""Custom exceptions for the nxsite CLI."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Sequence

from nxsite_common import ExitCode, Violation


class Stage(str, Enum):
    """External command stages of a lifecycle flow."""

    TEST = "test"
    RELOAD = "reload"


class NxsiteError(Exception):
    """Base exception for all nxsite operations."""

    exit_code: ExitCode

    def __init__(self, message: str, *, exit_code: ExitCode | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigDirMissingError(NxsiteError):
    """The nginx configuration directory does not exist."""

    exit_code = ExitCode.CONFIG_DIR_MISSING


class ArtifactAlreadyExistsError(NxsiteError):
    """A batch create would overwrite an existing site file."""

    exit_code = ExitCode.ARTIFACT_EXISTS


class ValidationFailedError(NxsiteError):
    """The site file was written but its parameters do not validate."""

    exit_code = ExitCode.VALIDATION_FAILED

    def __init__(self, violations: Sequence[Violation], path: Path | None):
        self.violations = list(violations)
        self.path = path
        lines = "\n".join(f"- {v.message}" for v in self.violations)
        if path is None:
            head = "No configuration file written"
        else:
            head = f"Configuration file {path} created, but the site cannot be activated"
        super().__init__(f"{head}:\n{lines}")


class InvalidSiteNameError(NxsiteError):
    """A host name that cannot be used as a file name under the config dir."""

    exit_code = ExitCode.VALIDATION_FAILED


class TemplateRenderError(NxsiteError):
    """A vhost template could not be loaded or rendered."""

    exit_code = ExitCode.TEMPLATE_ERROR


class FileWriteError(NxsiteError):
    """Writing the site file failed."""

    exit_code = ExitCode.FILE_WRITE_ERROR


class ArtifactNotFoundError(NxsiteError):
    """Requested site file does not exist in sites-available."""

    exit_code = ExitCode.ARTIFACT_NOT_FOUND


class LinkNotFoundError(NxsiteError):
    """The site is not enabled (no link in sites-enabled)."""

    exit_code = ExitCode.LINK_NOT_FOUND


class LinkConflictError(NxsiteError):
    """The sites-enabled link points somewhere other than the site file."""

    exit_code = ExitCode.LINK_CONFLICT


class LinkUpdateError(NxsiteError):
    """Creating or removing the sites-enabled link failed."""

    exit_code = ExitCode.LINK_UPDATE_FAILED


_STAGE_EXIT_CODES = {
    Stage.TEST: ExitCode.TEST_FAILED,
    Stage.RELOAD: ExitCode.RELOAD_FAILED,
}


class ExternalCommandFailedError(NxsiteError):
    """An external nginx command returned a non-zero status."""

    def __init__(self, stage: Stage, message: str, diagnostic: str = "", returncode: int | None = None):
        self.stage = stage
        self.diagnostic = diagnostic
        self.returncode = returncode
        text = f"{message}\n{diagnostic}" if diagnostic else message
        super().__init__(text, exit_code=_STAGE_EXIT_CODES[stage])
