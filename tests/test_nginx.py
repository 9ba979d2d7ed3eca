"""Tests for the nginx command gateway."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from nxsite_common import ExitCode
from nxsite.errors import ExternalCommandFailedError, Stage
from nxsite.services.nginx import CommandResult, NginxGateway, run_external


class TestRunExternal:
    def test_captures_output(self):
        fake_result = type("R", (), {"returncode": 1, "stdout": "", "stderr": "emerg: bad"})()
        with patch("nxsite.services.nginx.subprocess.run", return_value=fake_result) as run:
            result = run_external(["nginx", "-t"])
        assert result == CommandResult(1, "", "emerg: bad")
        assert not result.ok
        run.assert_called_once_with(["nginx", "-t"], check=False, capture_output=True, text=True)

    def test_missing_binary(self):
        with patch("nxsite.services.nginx.subprocess.run", side_effect=FileNotFoundError("nginx")):
            result = run_external(["nginx", "-t"])
        assert result.returncode == 127
        assert "nginx" in result.stderr


class TestNginxGateway:
    def test_test_config_ok(self, tmp_config, runner):
        gateway = NginxGateway.from_config(tmp_config, runner=runner)
        gateway.test_config()
        assert runner.calls == [tmp_config.test_command]

    def test_test_config_failure_carries_stderr(self, tmp_config, runner):
        runner.queue(tmp_config.test_command, CommandResult(1, "", "nginx: [emerg] unknown directive\n"))
        gateway = NginxGateway.from_config(tmp_config, runner=runner)
        with pytest.raises(ExternalCommandFailedError) as info:
            gateway.test_config()
        exc = info.value
        assert exc.stage is Stage.TEST
        assert exc.exit_code == ExitCode.TEST_FAILED
        assert exc.diagnostic == "nginx: [emerg] unknown directive"
        assert "unknown directive" in str(exc)
        assert exc.returncode == 1

    def test_reload_failure(self, tmp_config, runner):
        runner.queue(tmp_config.reload_command, CommandResult(3, "", "Job failed"))
        gateway = NginxGateway.from_config(tmp_config, runner=runner)
        with pytest.raises(ExternalCommandFailedError) as info:
            gateway.reload()
        assert info.value.stage is Stage.RELOAD
        assert info.value.exit_code == ExitCode.RELOAD_FAILED
        assert "exit status 3" in str(info.value)

    def test_from_config(self, tmp_config, runner):
        gateway = NginxGateway.from_config(tmp_config, runner=runner)
        gateway.reload()
        assert runner.calls == [tmp_config.reload_command]
