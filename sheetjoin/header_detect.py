from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence
from .cells import cell_text, is_numeric_text

logger = logging.getLogger(__name__)

# строки 0..10 включительно
DEFAULT_SCAN_ROWS = 11
GENERIC_COLUMN_PREFIX = "Column_"

Grid = Sequence[Sequence[Any]]


@dataclass(frozen=True)
class HeaderInfo:
    columns: List[str]
    header_row: Optional[int]  # None - заголовок не найден, имена сгенерированы
    data_start: int

    @property
    def synthetic(self) -> bool:
        return self.header_row is None


def _row_texts(row: Sequence[Any]) -> List[str]:
    return [cell_text(v) for v in row]


def _row_is_headerish(texts: List[str]) -> bool:
    # заголовок: минимум 2 непустые ячейки и хотя бы одна из них не число
    nonempty = [t for t in texts if t.strip()]
    if len(nonempty) < 2:
        return False
    return any(not is_numeric_text(t) for t in nonempty)


def _row_is_simple_header(texts: List[str]) -> bool:
    # запасной вариант для строки 0: все ячейки заполнены и ни одна не число
    if not texts:
        return False
    return all(t.strip() and not is_numeric_text(t) for t in texts)


def generic_columns(n: int) -> List[str]:
    return [f"{GENERIC_COLUMN_PREFIX}{i + 1}" for i in range(n)]


def header_from_row(grid: Grid, row_index: int) -> HeaderInfo:
    # ручное указание строки заголовка (0-based)
    if row_index < 0 or row_index >= len(grid):
        raise IndexError(f"Строка заголовка {row_index} вне таблицы (строк: {len(grid)})")
    return HeaderInfo(columns=_row_texts(grid[row_index]), header_row=row_index, data_start=row_index + 1)


def detect_header_row(grid: Grid, max_scan_rows: int = DEFAULT_SCAN_ROWS) -> Optional[HeaderInfo]:
    """
    Возвращает HeaderInfo или None для пустого листа.
    Идея:
      - просматриваем первые max_scan_rows строк сверху вниз
      - первая строка, похожая на заголовок, побеждает (без сравнения кандидатов)
      - если ничего не нашли - строка 0 как простой заголовок или Column_1..N
    """
    if not grid:
        return None

    n = min(max_scan_rows, len(grid))
    for idx in range(n):
        texts = _row_texts(grid[idx])
        if _row_is_headerish(texts):
            logger.debug("Заголовок найден в строке %d: %s", idx, texts)
            return HeaderInfo(columns=texts, header_row=idx, data_start=idx + 1)

    first = _row_texts(grid[0])
    if _row_is_simple_header(first):
        logger.debug("Простой заголовок в строке 0: %s", first)
        return HeaderInfo(columns=first, header_row=0, data_start=1)

    cols = generic_columns(len(first))
    logger.info("Заголовок не найден, используются имена %s", cols)
    return HeaderInfo(columns=cols, header_row=None, data_start=0)
