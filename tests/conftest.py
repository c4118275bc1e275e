"""Shared pytest fixtures for chain visualizer tests."""

import sys
from pathlib import Path

import pytest
from loguru import logger

# Add repo root to path so src.chainviz imports resolve
sys.path.insert(0, str(Path(__file__).parent.parent))

# Import all fixtures for global availability
from tests.fixtures.chain_fixtures import *


@pytest.fixture
def log_messages():
    """
    Capture loguru output for assertions.

    Returns:
        list[str]: Formatted log records (level | message), filled as the test runs

    Example:
        def test_logs(log_messages):
            do_something()
            assert any("WARNING" in m for m in log_messages)
    """
    messages = []
    handler_id = logger.add(lambda m: messages.append(m), format="{level} | {message}", level="DEBUG")
    yield messages
    logger.remove(handler_id)
