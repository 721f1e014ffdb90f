"""Shared fixtures for the concept draw tests."""

import random

import pytest
from fastapi.testclient import TestClient

from config import Settings
from core.draw_manager import DrawService
from main import create_app


# =============================================================================
# CATEGORY TABLES
# =============================================================================

@pytest.fixture
def small_table():
    """Two categories, three concepts in total."""
    return {
        "A": {"color": "#111", "concepts": ["x", "y"]},
        "B": {"color": "#222", "concepts": ["z"]},
    }


@pytest.fixture
def large_table():
    """Four categories with 50 uniquely labelled concepts each."""
    return {
        f"cat{i}": {
            "color": f"#00000{i}",
            "concepts": [f"cat{i}-{n}" for n in range(50)],
        }
        for i in range(4)
    }


@pytest.fixture
def service(small_table):
    return DrawService.from_table(small_table, rng=random.Random(1234))


# =============================================================================
# HTTP
# =============================================================================

@pytest.fixture
def settings(tmp_path):
    return Settings(
        trust_proxy_headers=True,
        static_dir=str(tmp_path / "public"),
        public_url="http://testserver",
        wifi_ssid=None,
        wifi_password=None,
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def from_ip():
    """Build headers that make a TestClient request come from a given address."""
    def _headers(ip):
        return {"X-Forwarded-For": ip}
    return _headers
