"""
Pytest configuration and shared fixtures for Netproxy Server tests.
"""

import logging
import tempfile
from pathlib import Path
from typing import Dict, Generator

import pytest
import structlog

from netproxy.config.settings import SERVER_ID_ENV_VAR
from netproxy.logging_config import clear_server_context


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """
    Restore default logging after each test.

    CLI tests install handlers bound to CliRunner streams that are closed once
    the invocation returns.
    """
    yield
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.WARNING)
    structlog.reset_defaults()
    clear_server_context()


@pytest.fixture(autouse=True)
def no_server_id_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a PROXY_SERVER_ID from the developer's shell out of the tests."""
    monkeypatch.delenv(SERVER_ID_ENV_VAR, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to temporary directory that is cleaned up after test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def tls_files(temp_dir: Path) -> Dict[str, str]:
    """
    Create placeholder TLS material on disk.

    Validation only checks that the files exist, so the content is not PEM.

    Returns:
        Mapping of role name to file path
    """
    paths = {}
    for name in ("server.crt", "server.key", "server-ca.crt", "cluster.crt", "cluster.key", "cluster-ca.crt"):
        path = temp_dir / name
        path.write_text(f"placeholder {name}\n")
        paths[name] = str(path)
    return paths


@pytest.fixture
def kubeconfig_file(temp_dir: Path) -> str:
    """Create an empty kubeconfig file and return its path."""
    path = temp_dir / "kubeconfig"
    path.write_text("apiVersion: v1\nkind: Config\n")
    return str(path)
