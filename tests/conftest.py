"""
Test Configuration File

Unified setup for Python path, avoiding sys.path.insert in each test file.
Provides isolated configuration and event bus fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add the src directory to the Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _isolated_singletons(tmp_path, monkeypatch):
    """
    Reset singletons around every test and keep config writes out of the
    real user directory.
    """
    from core.event_bus import EventBus
    from services.config_service import ConfigService

    base = tmp_path / "user-config"
    monkeypatch.setenv("APPDATA", str(base))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base))

    ConfigService.reset_instance()
    EventBus.reset_instance()
    yield
    ConfigService.reset_instance()
    EventBus.reset_instance()


@pytest.fixture
def config(tmp_path):
    """ConfigService backed by an empty file in the test's tmp dir."""
    from services.config_service import ConfigService

    return ConfigService(str(tmp_path / "config.yaml"))


@pytest.fixture
def event_bus():
    """Event bus stand-in that records every publish call."""
    from unittest.mock import MagicMock
    from core.event_bus import EventBus

    return MagicMock(spec=EventBus)


@pytest.fixture
def parameters():
    from core.dsp import FilterParameters

    return FilterParameters(cutoff_hz=1000.0, resonance_db=0.0, sample_rate=44100.0)
