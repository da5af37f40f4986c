"""Tests for server wiring."""

import json

import pytest
from unittest.mock import MagicMock

from selenium_flow.server import health_check, load_templates


def test_load_templates_without_file():
    assert len(load_templates(None)) == 0


def test_load_templates_from_file(tmp_path):
    path = tmp_path / "templates.json"
    path.write_text(json.dumps({"xpath": {"button": "//button[text()='%s']"}}))

    assert load_templates(str(path)).names == ["button"]


@pytest.mark.asyncio
async def test_health_check():
    response = await health_check(MagicMock())

    assert response.status_code == 200
    assert json.loads(response.body) == {"status": "ok"}
