# ============================================================================
# SCHEMA DEPLOYMENT SCRIPT TESTS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Tests - objectforge-schema command line
# PURPOSE: Dry-run rendering, status, surfaces and deployment wiring
# CREATED: 19 OCT 2026
# ============================================================================
"""
Schema Deployment Script Tests

Covers:
1. --dry-run prints dependency-ordered DDL
2. --status and --surfaces output
3. Deployment through a stubbed pool/executor
4. Argument and manifest errors

Run with:
    pytest tests/test_deploy_schema.py -v
"""

import json
import logging
import sys

import pytest

from core.config import reset_defaults
from scripts import deploy_schema

from tests.conftest import RecordingExecutor


@pytest.fixture(autouse=True)
def isolated(monkeypatch):
    for name in ("OBJECTFORGE_MANIFEST", "OBJECTFORGE_SQL_DIALECT", "OBJECTFORGE_DB_SCHEMA"):
        monkeypatch.delenv(name, raising=False)
    reset_defaults()
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    reset_defaults()


@pytest.fixture
def manifest_file(tmp_path, manifest_data):
    path = tmp_path / "objects.json"
    path.write_text(json.dumps(manifest_data))
    return str(path)


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["objectforge-schema", *argv])
    deploy_schema.main()


class TestDryRun:

    def test_sqlite_ddl_in_dependency_order(self, monkeypatch, capsys, manifest_file):
        _run(monkeypatch, "--manifest", manifest_file, "--dry-run")

        out = capsys.readouterr().out
        assert 'CREATE TABLE IF NOT EXISTS "categories"' in out
        assert out.index('"categories" (') < out.index('"articles" (')
        assert "TIMESTAMPTZ" not in out

    def test_postgres_dialect(self, monkeypatch, capsys, manifest_file):
        _run(monkeypatch, "--manifest", manifest_file, "--dry-run", "--dialect", "postgres", "--schema", "app")

        out = capsys.readouterr().out
        assert 'CREATE TABLE IF NOT EXISTS "app"."articles"' in out
        assert "TIMESTAMPTZ" in out


class TestInformational:

    def test_status(self, monkeypatch, capsys, manifest_file):
        _run(monkeypatch, "--manifest", manifest_file, "--status")

        out = capsys.readouterr().out
        assert "Classes: 3" in out
        assert "deps: categories" in out

    def test_surfaces(self, monkeypatch, capsys, manifest_file):
        _run(monkeypatch, "--manifest", manifest_file, "--surfaces")

        document = json.loads(capsys.readouterr().out)
        assert [t["function"]["name"] for t in document["tools"]] == ["publish"]


class TestDeploy:

    def test_initializes_every_table(self, monkeypatch, capsys, manifest_file):
        executor = RecordingExecutor()

        class FakePool:
            def __init__(self, **kwargs):
                self.kwargs = kwargs

            async def __aenter__(self):
                return self

            async def __aexit__(self, *exc):
                return False

        monkeypatch.setattr(deploy_schema, "DatabasePool", FakePool)
        monkeypatch.setattr(deploy_schema, "PostgresExecutor", lambda pool: executor)

        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, "--manifest", manifest_file)

        assert exc_info.value.code == 0
        assert len(executor.scripts) == 3
        assert "TIMESTAMPTZ" in executor.scripts[0]
        out = capsys.readouterr().out
        assert "initialized  Category" in out
        assert "Deployment completed" in out


class TestErrors:

    def test_manifest_required(self, monkeypatch):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch)
        assert exc_info.value.code == 2

    def test_empty_manifest(self, monkeypatch, capsys, tmp_path):
        path = tmp_path / "objects.yml"
        path.write_text("")

        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, "--manifest", str(path), "--dry-run")

        assert exc_info.value.code == 1
        assert "Manifest file is empty" in capsys.readouterr().err
