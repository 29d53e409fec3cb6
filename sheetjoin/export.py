from __future__ import annotations
import logging
from io import BytesIO
from pathlib import Path
from typing import Union
import pandas as pd
from .cells import CellKind, cell_kind
from .errors import EmptyResultError
from .join import JoinResult

logger = logging.getLogger(__name__)

RESULT_SHEET = "Inner Join Result"
SUMMARY_SHEET = "Join Summary"


def _excel_value(v):
    # даты/числа/bool остаются как есть, пустые - пустая ячейка
    if cell_kind(v) is CellKind.ABSENT:
        return None
    return v


def result_to_dataframe(result: JoinResult) -> pd.DataFrame:
    # колонки строго в порядке result.columns (основная таблица + только у поставщика)
    records = [[_excel_value(r.get(c)) for c in result.columns] for r in result.rows]
    return pd.DataFrame(records, columns=result.columns, dtype=object)


def summary_dataframe(result: JoinResult) -> pd.DataFrame:
    kp = result.key_pair
    st = result.stats
    rows = [
        ("Ключ (основная таблица)", kp.main if kp else ""),
        ("Ключ (поставщик)", kp.vendor if kp else ""),
        ("Способ выбора ключа", kp.tier if kp else ""),
        ("Строк в основной таблице", st.main_total),
        ("Строк у поставщика", st.vendor_total),
        ("Совпало", st.matched),
        ("Пустой ключ", st.null_keys),
        ("Без пары", st.unmatched),
        ("Доля совпадений, %", round(st.match_rate, 1)),
        ("Колонки только у поставщика", ", ".join(result.vendor_only_columns)),
    ]
    return pd.DataFrame(rows, columns=["Показатель", "Значение"])


def export_to_excel_bytes(result: JoinResult) -> bytes:
    if result.empty:
        raise EmptyResultError("Нет строк для записи: результат соединения пустой")

    df = result_to_dataframe(result)
    summary = summary_dataframe(result)
    bio = BytesIO()

    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name=RESULT_SHEET)
        summary.to_excel(writer, index=False, sheet_name=SUMMARY_SHEET)

        wb = writer.book
        fmt_header = wb.add_format({"bold": True, "bg_color": "#F2F2F2", "border": 1, "valign": "vcenter"})

        def format_df_sheet(sheet_name: str, frame: pd.DataFrame, default_width: int = 14, max_width: int = 60):
            ws = writer.sheets.get(sheet_name)
            if ws is None:
                return
            ws.freeze_panes(1, 0)
            ws.autofilter(0, 0, max(1, len(frame)), max(0, len(frame.columns) - 1))
            for col, name in enumerate(frame.columns):
                ws.write(0, col, name, fmt_header)
                longest = frame[name].head(500).map(lambda x: len(str(x)) if x is not None else 0).max() if len(frame) else 0
                w = max(len(str(name)), int(longest or 0)) + 2
                ws.set_column(col, col, max(default_width, min(max_width, w)))

        format_df_sheet(RESULT_SHEET, df)
        format_df_sheet(SUMMARY_SHEET, summary, default_width=20)

    return bio.getvalue()


def write_result_file(result: JoinResult, path: Union[str, Path]) -> Path:
    path = Path(path)
    data = export_to_excel_bytes(result)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("Результат записан: %s (%d строк)", path, len(result.rows))
    return path
