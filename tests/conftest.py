"""
Shared fixtures for sony_adcp tests.
"""

import pytest


@pytest.fixture(autouse=True)
def clean_adcp_environment(monkeypatch):
    """Keep the developer's ADCP_PROJECTOR_* variables out of the tests."""
    for name in (
        "ADCP_PROJECTOR_HOST",
        "ADCP_PROJECTOR_PORT",
        "ADCP_PROJECTOR_USERNAME",
        "ADCP_PROJECTOR_PASSWORD",
        "ADCP_PROJECTOR_USE_AUTH",
        "ADCP_PROJECTOR_TIMEOUT",
        "ADCP_PROJECTOR_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)
