"""Иерархия исключений sheetjoin."""

from __future__ import annotations

from typing import List, Sequence


class SheetJoinError(Exception):
    """Базовое исключение sheetjoin."""


class SourceNotFoundError(SheetJoinError):
    """Не найден ни один из ожидаемых входных файлов."""

    def __init__(self, role: str, candidates: Sequence[str]) -> None:
        self.role = role
        self.candidates: List[str] = [str(c) for c in candidates]
        super().__init__(f"Не найден файл ({role}). Проверены пути: {self.candidates}")


class EmptyTableError(SheetJoinError):
    """Файл прочитан, но в нём нет ни одной строки данных."""

    def __init__(self, role: str, source: str) -> None:
        self.role = role
        self.source = source
        super().__init__(f"Нет данных в файле ({role}): {source}")


class JoinKeyNotFoundError(SheetJoinError):
    """Не удалось подобрать колонку для соединения."""

    def __init__(self, main_columns: Sequence[str], vendor_columns: Sequence[str]) -> None:
        self.main_columns = list(main_columns)
        self.vendor_columns = list(vendor_columns)
        super().__init__(
            "Не найден ключ соединения. "
            f"Колонки основной таблицы: {self.main_columns}; "
            f"колонки таблицы поставщика: {self.vendor_columns}"
        )


class UnknownColumnError(SheetJoinError):
    """Явно указанная колонка ключа отсутствует в таблице."""

    def __init__(self, role: str, column: str, columns: Sequence[str]) -> None:
        self.role = role
        self.column = column
        self.columns = list(columns)
        super().__init__(f"Колонка '{column}' отсутствует в таблице ({role}). Доступны: {self.columns}")


class EmptyResultError(SheetJoinError):
    """Попытка записать пустой результат."""


class OutputVerificationError(SheetJoinError):
    """Записанный файл не совпадает с ожидаемой структурой."""

    def __init__(self, path: str, expected: Sequence[str], actual: Sequence[str]) -> None:
        self.path = path
        self.expected = list(expected)
        self.actual = list(actual)
        super().__init__(f"Проверка {path} не пройдена: ожидались колонки {self.expected}, получены {self.actual}")
