"""
Pytest configuration for little-owl tests.
"""
import os
import sys
import pytest

# Add the parent directory to sys.path so we can import little_owl
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the user's config file, .env and AWS variables out of the tests."""
    monkeypatch.setattr("little_owl.cli.get_config_file", lambda: None)
    monkeypatch.setattr("little_owl.cli.load_dotenv", lambda: False)
    for name in ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_REGION", "AWS_OUTPUT_BUCKET"):
        monkeypatch.delenv(name, raising=False)
