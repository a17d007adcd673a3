"""Integration tests for `reelauth init-db`.

The command runs in a fresh interpreter so that no model module has been
imported beforehand by the test session.
"""

import os
import sqlite3
import subprocess
import sys


def test_init_db_creates_users_table(tmp_path):
    db_path = tmp_path / "reelauth.db"
    env = {
        **os.environ,
        "REELAUTH_DATABASE_URL": f"sqlite+aiosqlite:///{db_path}",
        "REELAUTH_ENVIRONMENT": "development",
    }

    result = subprocess.run(
        [sys.executable, "-m", "reelauth", "init-db"],
        cwd=tmp_path,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )

    assert result.returncode == 0, result.stderr
    assert "Database initialized" in result.stdout

    with sqlite3.connect(db_path) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "users" in tables


def test_init_db_refuses_production_without_force(tmp_path):
    db_path = tmp_path / "reelauth.db"
    env = {
        **os.environ,
        "REELAUTH_DATABASE_URL": f"sqlite+aiosqlite:///{db_path}",
        "REELAUTH_ENVIRONMENT": "production",
    }

    result = subprocess.run(
        [sys.executable, "-m", "reelauth", "init-db"],
        cwd=tmp_path,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )

    assert result.returncode == 1
    assert not db_path.exists()
