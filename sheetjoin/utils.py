import os
import re
import json
import hashlib
from pathlib import Path
from typing import Any, Dict, Iterable

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_DATA_DIR = BASE_DIR / "data"

APPDATA = os.environ.get("APPDATA")
if APPDATA:
    USER_DATA_DIR = Path(APPDATA) / "SheetJoin" / "data"
else:
    USER_DATA_DIR = DEFAULT_DATA_DIR  # fallback

# Значения по умолчанию, если rules.json отсутствует или неполон
DEFAULT_RULES: Dict[str, Any] = {
    "preferred_join_columns": ["id", "ID", "Id", "customer_id", "customerid", "CustomerId"],
    "header_scan_rows": 11,
    "numeric_tolerance": 0.0001,
    "main_candidates": ["MainFile/MainData.xlsx"],
    "vendor_candidates": ["InputFolder/Data_Vendor.xlsx"],
    "output_dir": "OutputFolder",
    "output_prefix": "InnerJoinResult",
    "log_level": "INFO",
}

def load_json(path: Path, default: Any):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        return default

def save_json(path: Path, obj: Any):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)

def norm_text(s: Any) -> str:
    """
    Нормализация имени колонки для сигнатур:
    - BOM и неразрывные пробелы
    - lower
    - схлопывание пробелов
    """
    if s is None:
        return ""
    s = str(s).replace("\ufeff", "").replace("\u00a0", " ")
    s = s.strip().lower()
    return re.sub(r"\s+", " ", s)

def column_signature(columns: Iterable[Any]) -> str:
    # Сигнатура структуры таблицы по заголовкам (для профилей ключей)
    joined = "||".join([norm_text(c) for c in columns])
    return hashlib.md5(joined.encode("utf-8")).hexdigest()

def load_rules() -> Dict[str, Any]:
    """
    Настройки: значения по умолчанию <- data/rules.json пакета <- rules.json
    пользователя (каждый следующий уровень переопределяет ключи предыдущего).
    Битый или отсутствующий файл просто пропускается.
    """
    rules = dict(DEFAULT_RULES)
    for p in (DEFAULT_DATA_DIR / "rules.json", USER_DATA_DIR / "rules.json"):
        layer = load_json(p, {})
        if isinstance(layer, dict):
            rules.update(layer)
    return rules

def key_profiles_path() -> Path:
    p = USER_DATA_DIR / "key_profiles.json"
    if not p.exists():
        save_json(p, {})
    return p
