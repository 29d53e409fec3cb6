"""Командная строка sheetjoin."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional
from .errors import SheetJoinError
from .pipeline import run_inner_join
from .utils import load_rules

logger = logging.getLogger("sheetjoin")

EXIT_OK = 0
EXIT_NO_MATCHES = 1
EXIT_ERROR = 2

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheetjoin",
        description="Внутреннее соединение основной таблицы и таблицы поставщика (XLSX/CSV)",
    )
    parser.add_argument("--main", help="Файл основной таблицы (по умолчанию - из rules.json)")
    parser.add_argument("--vendor", help="Файл таблицы поставщика (по умолчанию - из rules.json)")
    parser.add_argument("--base-dir", help="Каталог, относительно которого ищутся файлы по умолчанию")
    parser.add_argument("--output-dir", help="Каталог для результата")
    parser.add_argument("--main-key", help="Колонка ключа в основной таблице")
    parser.add_argument("--vendor-key", help="Колонка ключа в таблице поставщика")
    parser.add_argument("--use-profiles", action="store_true", help="Использовать сохранённый выбор ключа")
    parser.add_argument("--remember-key", action="store_true", help="Сохранить выбранный ключ для этих структур таблиц")
    parser.add_argument("--no-verify", action="store_true", help="Не перечитывать записанный файл")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, help="Уровень логирования")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    rules = load_rules()

    level = args.log_level or str(rules.get("log_level") or "INFO").upper()
    if level not in LOG_LEVELS:
        # неверное значение в rules.json не должно ронять запуск
        level = "INFO"
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        report = run_inner_join(
            args.main,
            args.vendor,
            args.output_dir,
            base_dir=args.base_dir,
            main_key=args.main_key,
            vendor_key=args.vendor_key,
            use_profiles=args.use_profiles,
            remember_key=args.remember_key,
            rules=rules,
            verify=not args.no_verify,
        )
    except SheetJoinError as e:
        logger.error("%s", e)
        return EXIT_ERROR

    stats = report.result.stats
    if report.output_path is None:
        logger.warning("Совпадений не найдено, результат не записан")
        return EXIT_NO_MATCHES

    print(f"Результат: {report.output_path}")
    print(
        f"Совпало {stats.matched} из {stats.main_total} ({stats.match_rate:.1f}%), "
        f"пустых ключей {stats.null_keys}, без пары {stats.unmatched}"
    )
    print(f"Колонки: {report.result.columns}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
