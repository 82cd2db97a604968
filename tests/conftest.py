"""Pytest configuration and shared fixtures for testing."""

import sys
import textwrap
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from envguard.core import EnvValidation, reset_env_validation
from tests.fixtures.config_modules import AUTH_CONFIG, DB_CONFIG


@pytest.fixture
def write_module():
    """Return a helper writing dedented source into ``directory/filename``."""
    def _write(directory: Path, filename: str, source: str = "") -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def config_dir(tmp_path, write_module):
    """Directory holding db.config.py and auth.config.py plus noise files."""
    directory = tmp_path / "config"
    write_module(directory, "db.config.py", DB_CONFIG)
    write_module(directory, "auth.config.py", AUTH_CONFIG)
    write_module(directory, "readme.md", "# not a module\n")
    return directory


@pytest.fixture
def validation(config_dir):
    """Instance scanning only ``config_dir`` with the ``.config.py`` filter."""
    return EnvValidation().clear_resolution_paths().add_resolution_path(config_dir)


@pytest.fixture(autouse=True)
def _reset_global_instance():
    reset_env_validation()
    yield
    reset_env_validation()
