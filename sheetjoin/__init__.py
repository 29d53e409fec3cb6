"""
Этот пакет содержит:
- загрузку таблиц (XLSX/CSV) в виде матрицы значений
- поиск строки заголовка и сборку записей
- подбор ключа соединения между двумя структурами
- нестрогое сравнение значений ключа
- внутреннее соединение основной таблицы с таблицей поставщика
- экспорт результата в Excel
"""
from .cells import CellKind, cell_kind, cell_text, is_blank, parse_decimal
from .header_detect import HeaderInfo, detect_header_row
from .infer import Table, build_table, rows_from_grid
from .join_key import JoinKeyPair, resolve_join_key
from .matching import values_match
from .join import JoinResult, JoinStats, inner_join, reconcile_row
from .ingest import load_table
from .export import export_to_excel_bytes

__all__ = [
    "CellKind",
    "cell_kind",
    "cell_text",
    "is_blank",
    "parse_decimal",
    "HeaderInfo",
    "detect_header_row",
    "Table",
    "build_table",
    "rows_from_grid",
    "JoinKeyPair",
    "resolve_join_key",
    "values_match",
    "JoinResult",
    "JoinStats",
    "inner_join",
    "reconcile_row",
    "load_table",
    "export_to_excel_bytes",
]
