"""Пакетный запуск: поиск файлов -> чтение -> ключ -> соединение -> запись -> проверка."""

from __future__ import annotations
import datetime as dt
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
from .errors import EmptyTableError, JoinKeyNotFoundError, OutputVerificationError, SourceNotFoundError
from .export import write_result_file
from .ingest import load_grid, load_table
from .infer import Table, build_table
from .join import JoinResult, inner_join
from .join_key import JoinKeyPair, lookup_key_profile, manual_key_pair, remember_key_profile, resolve_join_key
from .utils import load_rules

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class RunReport:
    main: Table
    vendor: Table
    result: JoinResult
    output_path: Optional[Path] = None
    verified: bool = False


def discover_source(candidates: Sequence[PathLike], base_dir: Optional[PathLike] = None) -> Optional[Path]:
    # первый существующий и читаемый файл из списка
    base = Path(base_dir) if base_dir is not None else None
    for c in candidates:
        p = Path(c)
        if base is not None and not p.is_absolute():
            p = base / p
        if p.is_file() and os.access(p, os.R_OK):
            logger.info("Найден файл: %s", p)
            return p
    return None


def timestamped_output_path(output_dir: PathLike, prefix: str = "InnerJoinResult", now: Optional[dt.datetime] = None) -> Path:
    now = now or dt.datetime.now()
    return Path(output_dir) / f"{prefix}_{now.strftime('%Y%m%d_%H%M%S')}.xlsx"


def _locate(role: str, explicit: Optional[PathLike], candidates: Sequence[PathLike], base_dir: Optional[PathLike]) -> Path:
    cands = [explicit] if explicit is not None else list(candidates)
    found = discover_source(cands, base_dir)
    if found is None:
        raise SourceNotFoundError(role, [str(c) for c in cands])
    return found


def choose_key_pair(
    main: Table,
    vendor: Table,
    *,
    main_key: Optional[str] = None,
    vendor_key: Optional[str] = None,
    use_profiles: bool = False,
    preferred: Optional[Sequence[str]] = None,
) -> JoinKeyPair:
    """
    Порядок: явное указание -> сохранённый профиль -> эвристика.
    Если указан ключ только одной стороны, вторая подбирается по той же колонке.
    """
    if main_key or vendor_key:
        return manual_key_pair(main_key or vendor_key, vendor_key or main_key, main.columns, vendor.columns)
    if use_profiles:
        pair = lookup_key_profile(main.columns, vendor.columns)
        if pair is not None:
            return pair
    pair = resolve_join_key(main.columns, vendor.columns, preferred=preferred)
    if pair is None:
        raise JoinKeyNotFoundError(main.columns, vendor.columns)
    return pair


def verify_output(path: PathLike, expected_columns: Sequence[str], expected_rows: int) -> None:
    # перечитываем записанный файл тем же читателем
    table = build_table(load_grid(Path(path)), source=str(path))
    if table.columns != list(expected_columns) or len(table.rows) != expected_rows:
        raise OutputVerificationError(str(path), expected_columns, table.columns)
    logger.info("Проверка файла пройдена: %s", path)


def run_inner_join(
    main_path: Optional[PathLike] = None,
    vendor_path: Optional[PathLike] = None,
    output_dir: Optional[PathLike] = None,
    *,
    base_dir: Optional[PathLike] = None,
    main_key: Optional[str] = None,
    vendor_key: Optional[str] = None,
    use_profiles: bool = False,
    remember_key: bool = False,
    rules: Optional[Dict[str, Any]] = None,
    write: bool = True,
    verify: bool = True,
    now: Optional[dt.datetime] = None,
) -> RunReport:
    rules = rules if rules is not None else load_rules()
    scan_rows = int(rules.get("header_scan_rows", 11))

    main_file = _locate("main", main_path, rules.get("main_candidates", []), base_dir)
    vendor_file = _locate("vendor", vendor_path, rules.get("vendor_candidates", []), base_dir)

    main = load_table(main_file, max_scan_rows=scan_rows)
    vendor = load_table(vendor_file, max_scan_rows=scan_rows)
    if main.empty:
        raise EmptyTableError("main", str(main_file))
    if vendor.empty:
        raise EmptyTableError("vendor", str(vendor_file))

    pair = choose_key_pair(
        main, vendor,
        main_key=main_key, vendor_key=vendor_key,
        use_profiles=use_profiles,
        preferred=rules.get("preferred_join_columns"),
    )
    if remember_key:
        remember_key_profile(main.columns, vendor.columns, pair)

    result = inner_join(
        main.rows, vendor.rows,
        main_columns=main.columns,
        vendor_columns=vendor.columns,
        key_pair=pair,
        tolerance=float(rules.get("numeric_tolerance", 0.0001)),
    )
    report = RunReport(main=main, vendor=vendor, result=result)

    if result.empty:
        logger.warning(
            "Совпадений нет между %s и %s (ключ %s <-> %s), файл не записан",
            main_file, vendor_file, pair.main, pair.vendor,
        )
        return report

    if not write:
        return report

    base = Path(base_dir) if base_dir is not None else Path(".")
    out_dir = Path(output_dir) if output_dir is not None else base / rules.get("output_dir", "OutputFolder")
    out_path = timestamped_output_path(out_dir, rules.get("output_prefix", "InnerJoinResult"), now=now)
    report.output_path = write_result_file(result, out_path)

    if verify:
        try:
            verify_output(report.output_path, result.columns, len(result.rows))
        except OutputVerificationError:
            # файл с неверной структурой не оставляем
            report.output_path.unlink()
            logger.error("Файл не прошёл проверку и удалён: %s", report.output_path)
            raise
        report.verified = True
    return report
