from __future__ import annotations
import datetime as dt
import hashlib
import streamlit as st
import pandas as pd
from sheetjoin.errors import SheetJoinError
from sheetjoin.ingest import load_table_from_upload
from sheetjoin.join import inner_join
from sheetjoin.join_key import lookup_key_profile, manual_key_pair, remember_key_profile, resolve_join_key
from sheetjoin.export import export_to_excel_bytes, result_to_dataframe
from sheetjoin.pipeline import timestamped_output_path
from sheetjoin.utils import load_rules

RULES = load_rules()
st.set_page_config(page_title="Соединение таблиц", layout="wide")
st.title("Внутреннее соединение: основная таблица + таблица поставщика")
# =========================

# Helpers
# =========================
TIER_MAP = {
    "exact": "точное совпадение имени",
    "case_insensitive": "совпадение без учёта регистра",
    "contains_id": "колонки с 'id' в названии",
    "contains_name": "колонки с 'name' в названии",
    "common": "первая общая колонка",
    "profile": "сохранённый профиль",
    "manual": "выбрано вручную",
}

def _safe_key_prefix(src_key: str) -> str:
    # MD5-хеш как ключ виджетов: имена файлов могут содержать кириллицу и спецсимволы
    return hashlib.md5(src_key.encode("utf-8")).hexdigest()

def _rows_preview(rows: list[dict], columns: list[str], n: int = 8) -> pd.DataFrame:
    return pd.DataFrame([[r.get(c) for c in columns] for r in rows[:n]], columns=columns, dtype=object)
# =========================

# Uploads
# =========================
c1, c2 = st.columns(2)
with c1:
    main_file = st.file_uploader("Основная таблица (эталон)", type=["xlsx", "xlsm", "csv"])
with c2:
    vendor_file = st.file_uploader("Таблица поставщика", type=["xlsx", "xlsm", "csv"])

if not main_file or not vendor_file:
    st.warning("Загрузите обе таблицы.")
    st.stop()

if "header_overrides" not in st.session_state:
    st.session_state["header_overrides"] = {}

scan_rows = int(RULES.get("header_scan_rows", 11))
tables = {}
bad_tables = []

for role, up in (("main", main_file), ("vendor", vendor_file)):
    src_key = f"{role}::{up.name}"
    try:
        ov = st.session_state["header_overrides"].get(src_key)
        tables[role] = load_table_from_upload(up, header_override=ov, max_scan_rows=scan_rows)
    except (SheetJoinError, ValueError, TypeError, IndexError, OSError) as e:
        bad_tables.append({"Таблица": role, "Файл": up.name, "Ошибка": f"{type(e).__name__}: {e}"})

if bad_tables:
    st.error("Не удалось прочитать таблицы:")
    st.dataframe(pd.DataFrame(bad_tables), width="stretch")
    st.stop()


# Контроль распознавания
st.subheader("Контроль распознавания")
titles = {"main": "Основная таблица", "vendor": "Таблица поставщика"}

for role, up in (("main", main_file), ("vendor", vendor_file)):
    t = tables[role]
    src_key = f"{role}::{up.name}"
    kp = _safe_key_prefix(src_key)

    with st.expander(f"{titles[role]}: {up.name} (записей: {len(t.rows)})", expanded=False):
        if t.header_row is None:
            st.write("Строка заголовка не найдена, колонки названы автоматически.")
        else:
            st.write(f"Заголовок: строка {t.header_row + 1}")
        for w in t.warnings[:20]:
            st.caption(w)

        new_start = st.number_input(
            "Строка заголовка (Excel)", 1, max(1, len(t.rows) + 50),
            int((t.header_row or 0) + 1), key=f"{kp}__hs"
        )
        b1, b2 = st.columns(2)
        with b1:
            if st.button("Сохранить заголовок", key=f"{kp}__save_hdr"):
                st.session_state["header_overrides"][src_key] = int(new_start) - 1
                st.rerun()
        with b2:
            if st.button("Определять автоматически", key=f"{kp}__auto_hdr"):
                st.session_state["header_overrides"].pop(src_key, None)
                st.rerun()

        st.dataframe(_rows_preview(t.rows, t.columns), width="stretch")

main_t = tables["main"]
vendor_t = tables["vendor"]
if main_t.empty or vendor_t.empty:
    st.error("Одна из таблиц не содержит данных.")
    st.stop()


# Ключ соединения
st.subheader("Ключ соединения")
auto_pair = lookup_key_profile(main_t.columns, vendor_t.columns) or resolve_join_key(
    main_t.columns, vendor_t.columns, preferred=RULES.get("preferred_join_columns")
)
if auto_pair is None:
    st.warning(
        "Ключ не найден автоматически. Выберите колонки вручную. "
        f"Колонки основной таблицы: {main_t.columns}; поставщика: {vendor_t.columns}"
    )
else:
    st.info(f"Найден ключ: {auto_pair.main} ↔ {auto_pair.vendor} ({TIER_MAP.get(auto_pair.tier, auto_pair.tier)})")

k1, k2 = st.columns(2)
with k1:
    main_key = st.selectbox(
        "Колонка основной таблицы",
        [""] + main_t.columns,
        index=([""] + main_t.columns).index(auto_pair.main) if auto_pair else 0,
    )
with k2:
    vendor_key = st.selectbox(
        "Колонка таблицы поставщика",
        [""] + vendor_t.columns,
        index=([""] + vendor_t.columns).index(auto_pair.vendor) if auto_pair else 0,
    )

if not main_key or not vendor_key:
    st.stop()

pair = manual_key_pair(main_key, vendor_key, main_t.columns, vendor_t.columns)
if auto_pair and (pair.main, pair.vendor) == (auto_pair.main, auto_pair.vendor):
    pair = auto_pair

if st.button("Запомнить ключ для этих структур таблиц"):
    remember_key_profile(main_t.columns, vendor_t.columns, pair)
    st.success("Сохранено.")


st.divider()
st.subheader("Формирование результата")

# результат от других файлов/ключа/заголовков не показываем
run_sig = (
    main_file.name, main_file.size, vendor_file.name, vendor_file.size,
    pair.main, pair.vendor, main_t.header_row, vendor_t.header_row,
)
if st.session_state.get("result_sig") != run_sig:
    st.session_state.pop("result", None)
    st.session_state["result_sig"] = run_sig

if st.button("Выполнить соединение", type="primary"):
    result = inner_join(
        main_t.rows,
        vendor_t.rows,
        main_columns=main_t.columns,
        vendor_columns=vendor_t.columns,
        key_pair=pair,
        tolerance=float(RULES.get("numeric_tolerance", 0.0001)),
    )
    st.session_state["result"] = result

result = st.session_state.get("result")
if result is not None:
    stats = result.stats
    m1, m2, m3, m4 = st.columns(4)
    with m1:
        st.metric("Совпало", stats.matched)
    with m2:
        st.metric("Строк в основной", stats.main_total)
    with m3:
        st.metric("Пустой ключ", stats.null_keys)
    with m4:
        st.metric("Доля совпадений", f"{stats.match_rate:.1f}%")

    if result.empty:
        st.error("Совпадений нет. Проверьте значения ключа, формат чисел/текста и регистр.")
    else:
        if result.vendor_only_columns:
            st.caption(f"Добавлены колонки поставщика: {', '.join(result.vendor_only_columns)}")
        st.dataframe(result_to_dataframe(result).head(500), width="stretch")

        out_name = timestamped_output_path(".", RULES.get("output_prefix", "InnerJoinResult"), now=dt.datetime.now()).name
        st.download_button(
            "Скачать Excel",
            data=export_to_excel_bytes(result),
            file_name=out_name,
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
