from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from .cells import is_blank
from .header_detect import DEFAULT_SCAN_ROWS, Grid, HeaderInfo, detect_header_row, header_from_row

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


@dataclass
class Table:
    source: str
    columns: List[str]
    rows: List[Row]
    header_row: Optional[int] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.rows

    def __len__(self) -> int:
        return len(self.rows)


def ordered_columns(names: Sequence[str]) -> List[str]:
    # Порядок колонок как в заголовке: первое вхождение, без пустых имён
    seen = set()
    out = []
    for n in names:
        if not str(n).strip() or n in seen:
            continue
        seen.add(n)
        out.append(n)
    return out


def schema_of(rows: Sequence[Row]) -> List[str]:
    # Схема = ключи первой строки в порядке вставки
    if not rows:
        return []
    return list(rows[0].keys())


def rows_from_grid(grid: Grid, header: HeaderInfo) -> List[Row]:
    out: List[Row] = []
    names = header.columns
    for raw in grid[header.data_start:]:
        row: Row = {}
        has_data = False
        for name, value in zip(names, raw):
            # дубликаты имён: побеждает последняя запись
            row[name] = value
            if not is_blank(value):
                has_data = True
        # строки без данных не нужны
        if has_data:
            out.append(row)
    return out


def _consistency_warnings(rows: List[Row], source: str, limit: int = 20) -> List[str]:
    if not rows:
        return []
    expected = set(rows[0].keys())
    bad = [i for i, r in enumerate(rows[1:], start=2) if set(r.keys()) != expected]
    warnings = [f"{source}: запись {i} имеет другой набор колонок" for i in bad[:limit]]
    if len(bad) > limit:
        warnings.append(f"{source}: ещё {len(bad) - limit} записей с другим набором колонок")
    return warnings


def build_table(
    grid: Grid,
    source: str = "",
    header_override: Optional[int] = None,
    max_scan_rows: int = DEFAULT_SCAN_ROWS,
) -> Table:
    """
    Сырая матрица -> Table.
    header_override - номер строки заголовка (0-based), если пользователь
    указал его вручную.
    """
    if header_override is not None:
        header = header_from_row(grid, header_override)
    else:
        header = detect_header_row(grid, max_scan_rows=max_scan_rows)

    if header is None:
        msg = f"Нет данных в {source or 'таблице'}"
        logger.warning(msg)
        return Table(source=source, columns=[], rows=[], header_row=None, warnings=[msg])

    warnings: List[str] = []
    if header.synthetic:
        warnings.append(f"{source}: строка заголовка не найдена, колонки названы {header.columns}")

    dupes = sorted({c for c in header.columns if c.strip() and header.columns.count(c) > 1})
    if dupes:
        warnings.append(f"{source}: повторяющиеся заголовки {dupes}, используется последнее значение")

    rows = rows_from_grid(grid, header)
    warnings.extend(_consistency_warnings(rows, source))
    for w in warnings:
        logger.warning(w)

    logger.info(
        "%s: заголовок в строке %s, колонок %d, записей %d",
        source, header.header_row, len(header.columns), len(rows),
    )
    return Table(
        source=source,
        columns=ordered_columns(header.columns),
        rows=rows,
        header_row=header.header_row,
        warnings=warnings,
    )
