"""Shared fixtures for CLI command tests."""

import json
import logging

import pytest
from click.testing import CliRunner

from taskvault.cli.main import cli
from taskvault.config import ENV_VARS


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch, tmp_path):
    """Run every CLI test from tmp_path with no TASKVAULT_* overrides, and
    drop the stderr handler the CLI installs once the test is over."""
    for var in list(ENV_VARS.values()) + ["TASKVAULT_CONFIG_FILE"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    package_logger = logging.getLogger("taskvault")
    for handler in list(package_logger.handlers):
        if getattr(handler, "_taskvault_cli", False):
            package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def invoke(cli_runner):
    """Invoke the CLI and decode the JSON envelope from stdout."""

    def _invoke(*args):
        result = cli_runner.invoke(cli, [str(a) for a in args])
        payload = json.loads(result.stdout) if result.stdout.strip().startswith("{") else None
        return result, payload

    return _invoke


@pytest.fixture
def config_file(tmp_path):
    """Return a helper that writes an [engine] TOML table."""

    def _write(**values):
        lines = ["[engine]"]
        for key, value in values.items():
            rendered = str(value).lower() if isinstance(value, bool) else value
            lines.append(f"{key} = {rendered}")
        path = tmp_path / "taskvault-test.toml"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
