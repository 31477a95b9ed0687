"""Shared fixtures: throwaway public/ and data/ directories wired in via env."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from minihttp import config

ORDERS = [
    {"order_id": 1, "order_date": "21 Jan 2020", "order_status": "Delivered"},
    {"order_id": 2, "order_date": "2 Feb 2020", "order_status": "Pending"},
]


@pytest.fixture
def public_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text("<h1>index</h1>")
    (root / "health.html").write_text("<h1>health</h1>")
    (root / "404.html").write_text("<h1>not found</h1>")
    (root / "style.css").write_text("h1 { color: red; }")
    (root / "app.js").write_text("console.log('hi');")
    monkeypatch.setenv(config.PUBLIC_PATH_ENV, str(root))
    return root


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "data"
    root.mkdir()
    (root / config.ORDERS_FILE).write_text(json.dumps(ORDERS))
    monkeypatch.setenv(config.DATA_PATH_ENV, str(root))
    return root
