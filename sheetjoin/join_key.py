from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from .errors import UnknownColumnError
from .utils import column_signature, key_profiles_path, load_json, save_json

logger = logging.getLogger(__name__)

PREFERRED_JOIN_COLUMNS: Tuple[str, ...] = ("id", "ID", "Id", "customer_id", "customerid", "CustomerId")


@dataclass(frozen=True)
class JoinKeyPair:
    main: str
    vendor: str
    tier: str = ""


Strategy = Callable[[List[str], List[str], Sequence[str]], Optional[Tuple[str, str]]]


def _find_case_insensitive(target: str, columns: List[str]) -> Optional[str]:
    t = target.casefold()
    for c in columns:
        if c.casefold() == t:
            return c
    return None


def _exact_preferred(main: List[str], vendor: List[str], preferred: Sequence[str]):
    vendor_set = set(vendor)
    main_set = set(main)
    for p in preferred:
        if p in main_set and p in vendor_set:
            return p, p
    return None


def _case_insensitive_preferred(main: List[str], vendor: List[str], preferred: Sequence[str]):
    for p in preferred:
        m = _find_case_insensitive(p, main)
        v = _find_case_insensitive(p, vendor)
        if m is not None and v is not None:
            return m, v
    return None


def _contains(token: str) -> Strategy:
    def strategy(main: List[str], vendor: List[str], preferred: Sequence[str]):
        for m in main:
            if token not in m.casefold():
                continue
            for v in vendor:
                if token in v.casefold():
                    return m, v
        return None
    return strategy


def _first_common(main: List[str], vendor: List[str], preferred: Sequence[str]):
    # порядок основной таблицы - чтобы результат не зависел от порядка set
    vendor_set = set(vendor)
    for m in main:
        if m in vendor_set:
            return m, m
    return None


# от самой надёжной эвристики к самой слабой, первая сработавшая побеждает
KEY_STRATEGIES: List[Tuple[str, Strategy]] = [
    ("exact", _exact_preferred),
    ("case_insensitive", _case_insensitive_preferred),
    ("contains_id", _contains("id")),
    ("contains_name", _contains("name")),
    ("common", _first_common),
]


def _dedup(columns: Sequence[str]) -> List[str]:
    seen = set()
    out = []
    for c in columns:
        c = str(c)
        if c not in seen:
            seen.add(c)
            out.append(c)
    return out


def resolve_join_key(
    main_columns: Sequence[str],
    vendor_columns: Sequence[str],
    preferred: Optional[Sequence[str]] = None,
) -> Optional[JoinKeyPair]:
    main = _dedup(main_columns)
    vendor = _dedup(vendor_columns)
    pref = list(preferred) if preferred is not None else list(PREFERRED_JOIN_COLUMNS)

    for tier, strategy in KEY_STRATEGIES:
        found = strategy(main, vendor, pref)
        if found is not None:
            pair = JoinKeyPair(main=found[0], vendor=found[1], tier=tier)
            logger.info("Ключ соединения (%s): %s <-> %s", tier, pair.main, pair.vendor)
            return pair

    logger.warning("Ключ соединения не найден. Основная: %s; поставщик: %s", main, vendor)
    return None


def manual_key_pair(
    main_key: str,
    vendor_key: str,
    main_columns: Sequence[str],
    vendor_columns: Sequence[str],
) -> JoinKeyPair:
    # явный выбор пользователя, проверяем что колонки существуют
    if main_key not in main_columns:
        raise UnknownColumnError("main", main_key, main_columns)
    if vendor_key not in vendor_columns:
        raise UnknownColumnError("vendor", vendor_key, vendor_columns)
    return JoinKeyPair(main=main_key, vendor=vendor_key, tier="manual")


# =========================

# Профили: запомненный выбор ключа для пары структур таблиц
# =========================
def _profile_id(main_columns: Sequence[str], vendor_columns: Sequence[str]) -> str:
    return f"{column_signature(main_columns)}:{column_signature(vendor_columns)}"


def load_key_profiles() -> Dict[str, Any]:
    obj = load_json(key_profiles_path(), {})
    return obj if isinstance(obj, dict) else {}


def lookup_key_profile(main_columns: Sequence[str], vendor_columns: Sequence[str]) -> Optional[JoinKeyPair]:
    prof = load_key_profiles().get(_profile_id(main_columns, vendor_columns))
    if not isinstance(prof, dict):
        return None
    m = prof.get("main")
    v = prof.get("vendor")
    # колонки могли переименовать - тогда профиль не применяем
    if m not in main_columns or v not in vendor_columns:
        return None
    logger.info("Ключ из сохранённого профиля: %s <-> %s", m, v)
    return JoinKeyPair(main=m, vendor=v, tier="profile")


def remember_key_profile(main_columns: Sequence[str], vendor_columns: Sequence[str], pair: JoinKeyPair) -> None:
    profiles = load_key_profiles()
    profiles[_profile_id(main_columns, vendor_columns)] = {"main": pair.main, "vendor": pair.vendor}
    save_json(key_profiles_path(), profiles)
