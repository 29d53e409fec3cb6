from __future__ import annotations
import csv
import logging
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any, List, Optional, Union
import pandas as pd
from openpyxl import load_workbook
from .errors import SourceNotFoundError
from .header_detect import DEFAULT_SCAN_ROWS
from .infer import Table, build_table

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes]
EXCEL_SUFFIXES = (".xlsx", ".xlsm")
# =========================

# Excel: первый лист как матрица значений
# =========================
def _trim_row(values) -> List[Any]:
    # хвостовые пустые ячейки не считаются (как "последняя заполненная ячейка" строки)
    row = list(values)
    while row and row[-1] is None:
        row.pop()
    return row


def read_xlsx_grid(source: Source, sheet_name: Optional[str] = None) -> List[List[Any]]:
    data = BytesIO(source) if isinstance(source, bytes) else source
    wb = load_workbook(data, read_only=True, data_only=True)
    try:
        ws = wb[sheet_name] if sheet_name else wb.worksheets[0]
        rows = [_trim_row(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()

    # пустые строки в конце листа не нужны
    while rows and not rows[-1]:
        rows.pop()
    return rows
# =========================

# CSV: разделитель и кодировка подбираются по содержимому
# =========================
CSV_ENCODINGS = ("utf-8-sig", "utf-8", "cp1251")
CSV_DELIMITERS = ";,\t|"


def _guess_delimiter(text: str) -> str:
    """
    Сначала csv.Sniffer; если не справился - разделитель, который
    встречается во всех первых строках одинаковое (и ненулевое) число раз.
    Из равных побеждает более частый, по умолчанию ','.
    """
    head = text[:65536]
    try:
        found = csv.Sniffer().sniff(head, delimiters=CSV_DELIMITERS).delimiter
        if found:
            return found
    except csv.Error:
        pass

    lines = [ln for ln in head.splitlines() if ln.strip()][:20]
    best, best_key = ",", (False, 0)
    for d in CSV_DELIMITERS:
        counts = {ln.count(d) for ln in lines}
        total = sum(ln.count(d) for ln in lines)
        if not total:
            continue
        key = (len(counts) == 1, total)
        if key > best_key:
            best, best_key = d, key
    return best


def _parse_csv_text(text: str) -> List[List[Any]]:
    delim = _guess_delimiter(text)
    # ширина по самой длинной строке: над заголовком бывают короткие строки (название отчёта)
    width = max((len(r) for r in csv.reader(StringIO(text), delimiter=delim)), default=0)
    if not width:
        return []
    df = pd.read_csv(
        StringIO(text),
        header=None,
        names=range(width),
        sep=delim,
        engine="python",
        dtype=str,
        keep_default_na=False,
        na_values=[""],
    )
    return _frame_to_grid(df)


def _frame_to_grid(df: pd.DataFrame) -> List[List[Any]]:
    grid = [_trim_row(None if pd.isna(v) else v for v in rec) for rec in df.itertuples(index=False, name=None)]
    while grid and not grid[-1]:
        grid.pop()
    return grid


def read_csv_grid(data: bytes) -> List[List[Any]]:
    # без header: строку заголовка ищет header_detect
    for enc in CSV_ENCODINGS:
        try:
            text = data.decode(enc)
        except UnicodeDecodeError:
            continue
        try:
            return _parse_csv_text(text)
        except pd.errors.EmptyDataError:
            return []

    # ни одна кодировка не подошла целиком
    logger.warning("CSV: не удалось определить кодировку, битые символы заменены")
    try:
        return _parse_csv_text(data.decode("utf-8", errors="replace"))
    except pd.errors.EmptyDataError:
        return []
# =========================

# Main: файл -> Table
# =========================
def load_grid(source: Source, name: str = "") -> List[List[Any]]:
    """
    Сырая матрица значений. Тип файла определяется по расширению name
    (или пути); всё, что не .csv, читается как Excel.
    Ошибки чтения не перехватываются.
    """
    label = name or (str(source) if not isinstance(source, bytes) else "")
    if isinstance(source, (str, Path)) and not Path(source).is_file():
        raise SourceNotFoundError(label or "source", [str(source)])

    suffix = Path(label).suffix.lower()
    if suffix == ".csv":
        data = source if isinstance(source, bytes) else Path(source).read_bytes()
        return read_csv_grid(data)
    if suffix not in EXCEL_SUFFIXES:
        logger.warning("%s: неизвестное расширение, читаем как Excel", label or "источник")
    return read_xlsx_grid(source)


def load_table(
    source: Source,
    name: str = "",
    *,
    header_override: Optional[int] = None,
    max_scan_rows: int = DEFAULT_SCAN_ROWS,
) -> Table:
    label = name or (str(source) if not isinstance(source, bytes) else "upload")
    grid = load_grid(source, label)
    logger.info("Прочитано %s: %d строк", label, len(grid))
    return build_table(grid, source=label, header_override=header_override, max_scan_rows=max_scan_rows)


def load_table_from_upload(upload, *, header_override: Optional[int] = None, max_scan_rows: int = DEFAULT_SCAN_ROWS) -> Table:
    # объект st.file_uploader: .name и .getvalue()
    return load_table(upload.getvalue(), upload.name, header_override=header_override, max_scan_rows=max_scan_rows)
