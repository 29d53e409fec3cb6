from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from .cells import is_blank
from .infer import Row, ordered_columns, schema_of
from .join_key import JoinKeyPair, resolve_join_key
from .matching import NUMERIC_TOLERANCE, values_match

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinStats:
    main_total: int = 0
    vendor_total: int = 0
    matched: int = 0
    null_keys: int = 0

    @property
    def unmatched(self) -> int:
        return self.main_total - self.matched - self.null_keys

    @property
    def match_rate(self) -> float:
        # в процентах от всех строк основной таблицы
        if not self.main_total:
            return 0.0
        return 100.0 * self.matched / self.main_total

    def as_dict(self) -> Dict[str, Any]:
        return {
            "main_total": self.main_total,
            "vendor_total": self.vendor_total,
            "matched": self.matched,
            "null_keys": self.null_keys,
            "unmatched": self.unmatched,
            "match_rate": round(self.match_rate, 1),
        }


@dataclass
class JoinResult:
    rows: List[Row]
    columns: List[str]
    key_pair: Optional[JoinKeyPair]
    stats: JoinStats
    common_columns: List[str] = field(default_factory=list)
    vendor_only_columns: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.rows


def vendor_only_columns(main_columns: Sequence[str], vendor_columns: Sequence[str]) -> List[str]:
    main_set = set(main_columns)
    return [c for c in ordered_columns(vendor_columns) if c not in main_set]


def reconcile_row(main_row: Row, vendor_row: Row, main_order: Sequence[str], vendor_only: Sequence[str]) -> Row:
    """
    Строка результата: сначала все колонки основной таблицы в исходном порядке,
    затем колонки, которые есть только у поставщика.
    Значения основной таблицы не перезаписываются.
    """
    out: Row = {}
    for c in main_order:
        out[c] = main_row.get(c)
    for c in vendor_only:
        if c in out:
            continue
        out[c] = vendor_row.get(c)
    return out


def _first_partner(value: Any, vendor_rows: Sequence[Row], vendor_key: str, tolerance: float) -> Optional[Row]:
    for vr in vendor_rows:
        if values_match(value, vr.get(vendor_key), tolerance):
            return vr
    return None


def inner_join(
    main_rows: Sequence[Row],
    vendor_rows: Sequence[Row],
    *,
    main_columns: Optional[Sequence[str]] = None,
    vendor_columns: Optional[Sequence[str]] = None,
    key_pair: Optional[JoinKeyPair] = None,
    preferred: Optional[Sequence[str]] = None,
    tolerance: float = NUMERIC_TOLERANCE,
) -> JoinResult:
    """
    Внутреннее соединение "одна строка основной таблицы - первая подходящая
    строка поставщика".
      - main_columns: исходный порядок колонок основной таблицы
        (по умолчанию ключи первой строки)
      - key_pair: уже выбранный ключ; иначе подбирается resolve_join_key
    Строки с пустым ключом и строки без пары в результат не попадают.
    """
    main_order = list(main_columns) if main_columns is not None else schema_of(main_rows)
    main_order = ordered_columns(main_order)
    vendor_schema = list(vendor_columns) if vendor_columns is not None else schema_of(vendor_rows)

    common = [c for c in main_order if c in set(vendor_schema)]
    extra = vendor_only_columns(main_order, vendor_schema)
    out_columns = main_order + extra

    if not main_rows or not vendor_rows:
        logger.warning("Соединение пропущено: основная=%d, поставщик=%d строк", len(main_rows), len(vendor_rows))
        return JoinResult(
            rows=[], columns=out_columns, key_pair=key_pair,
            stats=JoinStats(main_total=len(main_rows), vendor_total=len(vendor_rows)),
            common_columns=common, vendor_only_columns=extra,
        )

    if key_pair is None:
        key_pair = resolve_join_key(main_order, vendor_schema, preferred=preferred)
    if key_pair is None:
        return JoinResult(
            rows=[], columns=out_columns, key_pair=None,
            stats=JoinStats(main_total=len(main_rows), vendor_total=len(vendor_rows)),
            common_columns=common, vendor_only_columns=extra,
        )

    logger.debug("Общие колонки: %s; только у поставщика: %s", common, extra)

    rows: List[Row] = []
    null_keys = 0
    for mr in main_rows:
        value = mr.get(key_pair.main)
        if is_blank(value):
            null_keys += 1
            continue
        partner = _first_partner(value, vendor_rows, key_pair.vendor, tolerance)
        if partner is None:
            continue
        rows.append(reconcile_row(mr, partner, main_order, extra))

    stats = JoinStats(
        main_total=len(main_rows),
        vendor_total=len(vendor_rows),
        matched=len(rows),
        null_keys=null_keys,
    )
    logger.info(
        "Соединение %s <-> %s: совпало %d из %d (%.1f%%), пустых ключей %d",
        key_pair.main, key_pair.vendor, stats.matched, stats.main_total, stats.match_rate, stats.null_keys,
    )
    if not rows:
        logger.warning("Совпадений нет: проверьте значения ключа, формат чисел/текста и регистр")

    return JoinResult(
        rows=rows, columns=out_columns, key_pair=key_pair, stats=stats,
        common_columns=common, vendor_only_columns=extra,
    )
