"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Sequence

import pytest
from openpyxl import Workbook

from sheetjoin import utils
from sheetjoin.utils import DEFAULT_RULES


@pytest.fixture(autouse=True)
def user_data_dir(tmp_path: Path, monkeypatch) -> Path:
    """Keep key profiles and user rules out of the real data directory."""
    d = tmp_path / "user_data"
    monkeypatch.setattr(utils, "USER_DATA_DIR", d)
    return d


@pytest.fixture
def write_xlsx():
    """Write a grid of values to an .xlsx file (first sheet)."""

    def _write(path: Path, grid: Sequence[Sequence[Any]]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        wb = Workbook()
        ws = wb.active
        for r, row in enumerate(grid, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
        wb.save(path)
        return path

    return _write


@pytest.fixture
def rules() -> dict:
    return dict(DEFAULT_RULES)


@pytest.fixture
def main_grid() -> List[List[Any]]:
    return [
        ["Customer export"],
        [],
        ["id", "name", "city"],
        [1, "Ann", "Oslo"],
        [2, "Bob", "Rome"],
        [3, "Cid", None],
        [None, "NoKey", "Lima"],
    ]


@pytest.fixture
def vendor_grid() -> List[List[Any]]:
    return [
        ["ID", "price", "city"],
        ["1", 10.5, "Bergen"],
        ["3", 30, "Paris"],
        ["4", 40, "Kyiv"],
    ]
