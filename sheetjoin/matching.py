from __future__ import annotations
from typing import Any, Optional
from .cells import CellKind, cell_kind, cell_text, parse_decimal

# погрешность представления float, а не допуск для разных значений
NUMERIC_TOLERANCE = 0.0001


def match_tier(a: Any, b: Any, tolerance: float = NUMERIC_TOLERANCE) -> Optional[str]:
    """
    Каким способом совпали два значения ключа:
      "exact"   - одинаковый тип и значение
      "text"    - строки совпали без учёта регистра и крайних пробелов
      "numeric" - обе строки - числа, разница меньше tolerance
    None - не совпали (пустые значения не совпадают никогда).
    """
    ka = cell_kind(a)
    kb = cell_kind(b)
    if ka is CellKind.ABSENT or kb is CellKind.ABSENT:
        return None

    if ka is kb and a == b:
        return "exact"

    sa = cell_text(a).strip()
    sb = cell_text(b).strip()
    if sa.casefold() == sb.casefold():
        return "text"

    na = parse_decimal(sa)
    nb = parse_decimal(sb)
    if na is not None and nb is not None and abs(na - nb) < tolerance:
        return "numeric"
    return None


def values_match(a: Any, b: Any, tolerance: float = NUMERIC_TOLERANCE) -> bool:
    return match_tier(a, b, tolerance) is not None
