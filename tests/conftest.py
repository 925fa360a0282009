import logging
import sys
from pathlib import Path

import pytest

# Make the top-level modules importable without installing the package
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.logger import LOGGER_NAME  # noqa: E402

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"

CI_ENV_VARS = (
    "GITHUB_ACTIONS",
    "CI",
    "GITHUB_WORKFLOW",
    "RUNNER_DEBUG",
    "RUN_QUARANTINED_TESTS",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Run every test as if outside CI, whatever the host environment is."""
    for name in CI_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers installed by setup_logger so captured streams do not leak between tests."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def go_repo():
    """Static Go repository with two modules, a vendor tree and an unparsable file."""
    return FIXTURES_DIR / "gorepo"


@pytest.fixture
def junit_report_path():
    """gotestsum-style report for the go_repo fixture."""
    return FIXTURES_DIR / "junit.xml"


@pytest.fixture
def go_tree(tmp_path):
    """Return a function writing {relative path: content} under tmp_path."""
    def write(files):
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path
    return write
