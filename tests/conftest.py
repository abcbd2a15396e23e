"""Shared fixtures for the perspective tests."""

from __future__ import annotations

import pytest
import requests

from cloudhealth_perspectives.transport.client import PerspectiveClient
from cloudhealth_perspectives.transport.config import ApiConfig

from fakes import API_URL, FakeServer


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def api_config():
    return ApiConfig(api_key="secret-key", url=API_URL, timeout=5)


@pytest.fixture
def client(server, api_config):
    return PerspectiveClient(api_config, session=server)


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")


@pytest.fixture
def categorize_payload():
    """Server document: one categorize group with two dynamic groups and an other entry."""
    return {
        "name": "Cost by Environment",
        "include_in_reports": True,
        "group": [
            {
                "name": "Environment",
                "ref_id": "2267742314003",
                "type": "categorize",
                "dynamic_group": [
                    {"ref_id": "2267742314010", "name": "prod", "val": "prod"},
                    {"ref_id": "2267742314011", "name": "staging", "val": "staging"},
                ],
            }
        ],
        "other_group": [
            {
                "constant_type": "Dynamic Group Block",
                "ref_id": "2267742314099",
                "blk_id": "2267742314003",
                "name": "Other",
                "val": "",
                "is_other": "true",
            }
        ],
    }
