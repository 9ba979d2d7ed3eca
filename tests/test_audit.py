"""Tests for the audit trail."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from unittest.mock import patch

import pytest

from nxsite_common import AuditEvent, ExitCode, NxsiteConfig
from nxsite.audit import AuditLog, audit
from nxsite.errors import LinkNotFoundError


@pytest.fixture
def audit_log(tmp_path: Path) -> AuditLog:
    return AuditLog(tmp_path / "log" / "audit.jsonl", tmp_path / "db" / "audit.db")


class TestAuditLog:
    def test_append_jsonl(self, audit_log: AuditLog):
        for i in range(3):
            audit_log.append_jsonl(AuditEvent(action="site.enable", target=f"site{i}"))

        lines = audit_log.jsonl_path.read_text().strip().splitlines()
        assert [json.loads(line)["target"] for line in lines] == ["site0", "site1", "site2"]

    def test_record_writes_both_sinks(self, audit_log: AuditLog):
        audit_log.record(AuditEvent(action="site.disable", target="teste", actor="tester", exit_code=9))

        data = json.loads(audit_log.jsonl_path.read_text())
        assert data["exit_code"] == 9
        [event] = audit_log.query()
        assert (event.action, event.target, event.actor, event.exit_code) == (
            "site.disable",
            "teste",
            "tester",
            9,
        )

    def test_query_without_db(self, audit_log: AuditLog):
        assert audit_log.query() == []
        assert not audit_log.db_path.exists()

    def test_query_newest_first_with_limit(self, audit_log: AuditLog):
        for host in ("alpha", "beta", "gamma"):
            audit_log.insert(AuditEvent(action="site.create", target=host))
        assert [e.target for e in audit_log.query(limit=2)] == ["gamma", "beta"]

    def test_query_filters(self, audit_log: AuditLog):
        audit_log.insert(AuditEvent(action="site.enable", target="alpha"))
        audit_log.insert(AuditEvent(action="site.enable", target="beta", result="failure", exit_code=6))
        audit_log.insert(AuditEvent(action="site.disable", target="alpha", result="failure", exit_code=9))

        assert [e.action for e in audit_log.query(site="alpha")] == ["site.disable", "site.enable"]
        assert [e.target for e in audit_log.query(failed_only=True)] == ["alpha", "beta"]
        assert [e.exit_code for e in audit_log.query(site="beta", failed_only=True)] == [6]

    def test_params_round_trip(self, audit_log: AuditLog):
        audit_log.insert(AuditEvent(action="site.enable", target="teste", params={"force": True}))
        assert audit_log.query()[0].params == {"force": True}


class TestAuditContextManager:
    def test_success(self, tmp_config: NxsiteConfig):
        with patch("nxsite.audit.get_config", return_value=tmp_config):
            with audit("site.create", target="teste.example.com", batch=True) as event:
                event.target = "teste"

        assert event.result == "success"
        assert event.duration_ms is not None and event.duration_ms >= 0

        data = json.loads(tmp_config.audit_jsonl_path.read_text().strip())
        assert data["action"] == "site.create"
        assert data["target"] == "teste"
        assert data["params"] == {"batch": True}
        assert tmp_config.audit_db_path.exists()

    def test_nxsite_error_records_exit_code(self, tmp_config: NxsiteConfig):
        with patch("nxsite.audit.get_config", return_value=tmp_config):
            with pytest.raises(LinkNotFoundError):
                with audit("site.disable", target="teste") as event:
                    raise LinkNotFoundError("Site teste is not enabled")

        assert event.result == "failure"
        assert event.exit_code == ExitCode.LINK_NOT_FOUND
        [stored] = AuditLog.from_config(tmp_config).query()
        assert stored.exit_code == 9
        assert stored.error == "Site teste is not enabled"

    def test_unexpected_error(self, tmp_config: NxsiteConfig):
        with patch("nxsite.audit.get_config", return_value=tmp_config):
            with pytest.raises(ValueError):
                with audit("site.enable", target="teste") as event:
                    raise ValueError("something broke")

        assert event.result == "failure"
        assert event.error == "something broke"
        assert event.exit_code == 1

    def test_actor_from_environment(self, tmp_config: NxsiteConfig, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("NXSITE_ACTOR", "deploy-bot")
        with patch("nxsite.audit.get_config", return_value=tmp_config):
            with audit("site.enable", target="teste") as event:
                pass
        assert event.actor == "deploy-bot"

    def test_unwritable_log_does_not_mask_outcome(self, tmp_config: NxsiteConfig, tmp_path: Path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        cfg = NxsiteConfig(config_dir=tmp_config.config_dir, log_dir=blocker / "log")
        with patch("nxsite.audit.get_config", return_value=cfg):
            with audit("site.enable", target="teste") as event:
                pass
            with pytest.raises(LinkNotFoundError):
                with audit("site.disable", target="teste"):
                    raise LinkNotFoundError("Site teste is not enabled")
        assert event.result == "success"

    def test_sqlite_error_is_logged(self, tmp_config: NxsiteConfig, caplog: pytest.LogCaptureFixture):
        with patch("nxsite.audit.get_config", return_value=tmp_config), patch.object(
            AuditLog, "insert", side_effect=sqlite3.OperationalError("database is locked")
        ):
            with audit("site.enable", target="teste"):
                pass
        assert "database is locked" in caplog.text
