from __future__ import annotations
import datetime as dt
import math
import re
from enum import Enum
from typing import Any, Optional
import pandas as pd

# Только "простая" десятичная запись: без запятых, nan/inf и подчёркиваний
DECIMAL_RE = re.compile(r"^[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?$")


class CellKind(str, Enum):
    ABSENT = "absent"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


def cell_kind(value: Any) -> CellKind:
    """
    Тип значения ячейки. Всё, что отдаёт читатель (openpyxl/pandas), обязано
    попасть в один из вариантов, иначе TypeError.
    NaN/NaT из pandas считаются пустыми.
    Время (time) и длительность (timedelta) из Excel - тоже DATE:
    в книге это ячейки с форматом даты/времени.
    """
    if value is None or value is pd.NaT:
        return CellKind.ABSENT
    # bool раньше числа: bool - подкласс int
    if isinstance(value, bool):
        return CellKind.BOOLEAN
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return CellKind.ABSENT
        return CellKind.NUMBER
    if isinstance(value, (dt.date, dt.datetime, dt.time, dt.timedelta)):
        return CellKind.DATE
    if isinstance(value, str):
        return CellKind.STRING

    # numpy-скаляры из pandas
    if hasattr(value, "item") and not isinstance(value, (list, tuple, dict)):
        try:
            return cell_kind(value.item())
        except (TypeError, ValueError):
            pass
    raise TypeError(f"Неподдерживаемый тип ячейки: {type(value).__name__}")


def is_absent(value: Any) -> bool:
    return cell_kind(value) is CellKind.ABSENT


def _duration_text(td: dt.timedelta) -> str:
    # как формат Excel [h]:mm:ss, доли секунды отбрасываются
    total = int(td.total_seconds())
    sign = "-" if total < 0 else ""
    h, rem = divmod(abs(total), 3600)
    m, s = divmod(rem, 60)
    return f"{sign}{h}:{m:02d}:{s:02d}"


def cell_text(value: Any) -> str:
    # Строковое представление ячейки (для заголовков, сравнения и пустоты)
    kind = cell_kind(value)
    if kind is CellKind.ABSENT:
        return ""
    if hasattr(value, "item") and not isinstance(value, (str, int, float, bool, dt.date, dt.time, dt.timedelta)):
        value = value.item()
    if kind is CellKind.BOOLEAN:
        return "true" if value else "false"
    if kind is CellKind.NUMBER:
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    if kind is CellKind.DATE:
        if isinstance(value, dt.datetime):
            if value.time() == dt.time(0, 0):
                return value.date().isoformat()
            return value.isoformat(sep=" ")
        if isinstance(value, dt.timedelta):
            return _duration_text(value)
        return value.isoformat()
    return value


def is_blank(value: Any) -> bool:
    # пусто = нет значения или строка из одних пробелов
    return cell_text(value).strip() == ""


def parse_decimal(text: Any) -> Optional[float]:
    if text is None:
        return None
    s = str(text).strip()
    if not DECIMAL_RE.match(s):
        return None
    try:
        return float(s)
    except ValueError:
        return None


def is_numeric_text(text: Any) -> bool:
    return parse_decimal(text) is not None
