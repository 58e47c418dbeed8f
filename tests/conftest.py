import pytest

# Let pytest rewrite the contract checks' asserts for readable failures
pytest.register_assert_rewrite("feedstore.testing.specs")

import json
from pathlib import Path
from typer.testing import CliRunner

from feedstore.infrastructure.config.settings import clear_test_config
from feedstore.testing.specs import unique_image


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep tests independent of the developer's environment and of each other."""
    for name in ("FEEDSTORE_STORE_BACKEND", "FEEDSTORE_STORE_LOCATION", "FEEDSTORE_LOGGING_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield
    clear_test_config()


@pytest.fixture
def feed_file(tmp_path: Path) -> Path:
    """A JSON feed file in the CLI import format, with two records."""
    records = [unique_image(location="NYC"), unique_image(description=None, location=None)]
    path = tmp_path / "feed.json"
    path.write_text(json.dumps([
        {"id": str(r.id), "description": r.description, "location": r.location, "url": r.url}
        for r in records
    ]))
    return path
