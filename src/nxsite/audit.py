"""Audit trail for site operations.

Each operation becomes one ``AuditEvent`` appended to a JSONL file and
inserted into a SQLite table. The JSONL file is for ``tail -f``/shipping;
the table backs ``nxsite history``.
"""

from __future__ import annotations

import getpass
import json
import logging
import os
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

from nxsite_common import AuditEvent, NxsiteConfig

from nxsite.config import get_config
from nxsite.errors import NxsiteError

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS site_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    node TEXT NOT NULL,
    actor TEXT NOT NULL,
    action TEXT NOT NULL,
    site TEXT NOT NULL DEFAULT '',
    params TEXT NOT NULL DEFAULT '{}',
    result TEXT NOT NULL DEFAULT 'success',
    error TEXT,
    exit_code INTEGER NOT NULL DEFAULT 0,
    duration_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_site_events_timestamp ON site_events(timestamp);
CREATE INDEX IF NOT EXISTS idx_site_events_site ON site_events(site);
"""

_COLUMNS = (
    "timestamp, node, actor, action, site, params, result, error, exit_code, duration_ms"
)


class AuditLog:
    """JSONL + SQLite sink for ``AuditEvent`` records."""

    def __init__(self, jsonl_path: Path, db_path: Path):
        self.jsonl_path = Path(jsonl_path)
        self.db_path = Path(db_path)

    @classmethod
    def from_config(cls, cfg: NxsiteConfig) -> AuditLog:
        return cls(cfg.audit_jsonl_path, cfg.audit_db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.executescript(_SCHEMA)
        return conn

    def append_jsonl(self, event: AuditEvent) -> None:
        self.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.jsonl_path, "a") as f:
            f.write(event.to_jsonl() + "\n")

    def insert(self, event: AuditEvent) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute(
                f"INSERT INTO site_events ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    event.timestamp.isoformat(),
                    event.node,
                    event.actor,
                    event.action,
                    event.target,
                    json.dumps(event.params, default=str),
                    event.result,
                    event.error,
                    event.exit_code,
                    event.duration_ms,
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def record(self, event: AuditEvent) -> None:
        self.append_jsonl(event)
        self.insert(event)
        log.debug("audit %s %s -> %s (%d)", event.action, event.target, event.result, event.exit_code)

    def query(
        self,
        *,
        site: str | None = None,
        failed_only: bool = False,
        limit: int = 20,
    ) -> list[AuditEvent]:
        """Most recent events first, optionally for one site or failures only."""
        if not self.db_path.exists():
            return []

        clauses: list[str] = []
        params: list[Any] = []
        if site:
            clauses.append("site = ?")
            params.append(site)
        if failed_only:
            clauses.append("result = 'failure'")
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)

        conn = self._connect()
        conn.row_factory = sqlite3.Row
        try:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM site_events{where} ORDER BY id DESC LIMIT ?",
                params,
            ).fetchall()
        finally:
            conn.close()

        return [
            AuditEvent(
                timestamp=row["timestamp"],
                node=row["node"],
                actor=row["actor"],
                action=row["action"],
                target=row["site"],
                params=json.loads(row["params"]),
                result=row["result"],
                error=row["error"],
                exit_code=row["exit_code"],
                duration_ms=row["duration_ms"],
            )
            for row in rows
        ]


def current_actor() -> str:
    return os.environ.get("NXSITE_ACTOR") or getpass.getuser()


@contextmanager
def audit(action: str, target: str = "", **params: Any) -> Generator[AuditEvent, None, None]:
    """Time the wrapped operation and record it, failures included.

    The yielded event may be updated inside the block (e.g. ``target`` once
    the host name is known). ``NxsiteError`` failures keep their exit code.
    """
    event = AuditEvent(actor=current_actor(), action=action, target=target, params=params)
    start = time.monotonic()
    try:
        yield event
    except NxsiteError as exc:
        event.result = "failure"
        event.error = str(exc)
        event.exit_code = int(exc.exit_code)
        raise
    except Exception as exc:
        event.result = "failure"
        event.error = str(exc)
        event.exit_code = 1
        raise
    finally:
        event.duration_ms = int((time.monotonic() - start) * 1000)
        try:
            AuditLog.from_config(get_config()).record(event)
        except (OSError, sqlite3.Error) as exc:
            # Never mask the operation's own outcome.
            log.warning("could not write audit event %s %s: %s", event.action, event.target, exc)
