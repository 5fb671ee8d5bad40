"""Pytest configuration for integration tests.

In-process flow tests need nothing external. Tests marked `live` call the real
Gemini API and run only when HEADCOOK_LIVE_TESTS=1 and GEMINI_API_KEY holds a
real key in the environment.
"""

import os

import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "live: calls the real Gemini API (set HEADCOOK_LIVE_TESTS=1)")


def pytest_collection_modifyitems(config, items):
    if os.getenv("HEADCOOK_LIVE_TESTS") == "1":
        return
    skip_live = pytest.mark.skip(reason="Live tests disabled. Set HEADCOOK_LIVE_TESTS=1 to run them.")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)
