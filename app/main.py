import sys
import os
import streamlit as st

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from festival.async_ops import run_history_audit
from festival.catalog import default_catalog, in_category, load_catalog
from festival.config import CATALOG_PATH, MAX_HISTORY, Paths, configure_logging
from festival.errors import EmptyOrderError
from festival.formatting import (
    format_currency,
    format_discount,
    format_timestamp,
    summarize_for_display,
)
from festival.lazy import iter_entries_by_day, lazy_top_items
from festival.order import adjust_quantity
from festival.service import CheckoutService
from History_Service.history import JsonFileHistoryStore, JsonFileOrderStore
from History_Service.report import export_filename, export_history_csv, history_summary


CATEGORY_TITLES = {"food": "フード", "drink": "ドリンク"}


# ============ Кэширование ============
@st.cache_resource
def get_service() -> CheckoutService:
    configure_logging()
    catalog = load_catalog(CATALOG_PATH) if CATALOG_PATH else default_catalog()
    return CheckoutService(
        catalog,
        JsonFileOrderStore(Paths.ORDER_FILE),
        JsonFileHistoryStore(Paths.HISTORY_FILE, MAX_HISTORY),
    )


# ============ Инициализация ============
st.set_page_config(page_title="屋台会計", page_icon="🥟", layout="wide")

service = get_service()
catalog = service.catalog

if "order" not in st.session_state:
    restored, breakdown = service.restore()
    st.session_state.order = restored
    # расчёт последнего нажатия "計算する"; +/- его не трогают
    st.session_state.breakdown = breakdown


def _set_quantity(item_id: str, delta: int):
    st.session_state.order = adjust_quantity(st.session_state.order, item_id, delta)
    service.save_draft(st.session_state.order)


def _reset():
    service.reset()
    st.session_state.order = {}
    st.session_state.breakdown = None


# ============ HEADER ============
st.title("🥟 屋台会計")
st.caption("飲み物入り3品 -200円 / 食品3品 -150円 / 任意2品 -100円")

left, right = st.columns([3, 2])

# ============ ORDER FORM ============
with left:
    st.header("注文")
    for category in catalog.categories():
        st.subheader(CATEGORY_TITLES.get(category, category))
        for item in catalog.filter(in_category(category)):
            cols = st.columns([4, 2, 1, 1, 1])
            qty = st.session_state.order.get(item.id, 0)
            with cols[0]:
                st.markdown(f"**{item.name}**")
            with cols[1]:
                st.write(format_currency(item.price))
            with cols[2]:
                st.button("−", key=f"dec_{item.id}", on_click=_set_quantity, args=(item.id, -1))
            with cols[3]:
                st.write(f"× {qty}")
            with cols[4]:
                st.button("＋", key=f"inc_{item.id}", on_click=_set_quantity, args=(item.id, 1))

    col1, col2 = st.columns(2)
    with col1:
        if st.button("計算する", type="primary", use_container_width=True):
            result = service.checkout(st.session_state.order)
            if result.is_right:
                st.session_state.breakdown = service.explain(result.value.order)
            elif isinstance(result.value, EmptyOrderError):
                st.session_state.breakdown = None
                st.info("商品を選んでください。")
            else:
                st.error(f"❌ {result.value}")
    with col2:
        st.button("リセット", on_click=_reset, use_container_width=True)

# ============ RESULTS ============
with right:
    st.header("会計")
    breakdown = st.session_state.breakdown
    if breakdown is None:
        st.metric("小計", format_currency(0))
        st.metric("割引", format_discount(0))
        st.metric("合計", format_currency(0))
        st.caption("まだ計算が行われていません。")
    else:
        totals = breakdown.totals
        st.metric("小計", format_currency(totals.subtotal))
        st.metric("割引", format_discount(totals.discount))
        st.metric("合計", format_currency(totals.final))

        sets = summarize_for_display(totals.applied_sets)
        if sets:
            for name in sets:
                st.write(f"• {name}")
        else:
            st.caption("適用されたセットはありません。")

        with st.expander("セットの内訳"):
            for applied in breakdown.applied:
                names = " + ".join(catalog.get(i).name for i in applied.items)
                st.write(f"{applied.label}: {names}")
            for item_id, qty in breakdown.leftover:
                st.write(f"単品: {catalog.get(item_id).name} × {qty}")

st.divider()

# ============ HISTORY ============
st.header("履歴")
entries = service.history()

if not entries:
    st.caption("まだ履歴がありません。")
else:
    summary = history_summary(entries)
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("件数", summary["orders"])
    with col2:
        st.metric("売上", format_currency(summary["net_sales"]))
    with col3:
        st.metric("割引合計", format_discount(summary["total_discount"]))
    with col4:
        st.metric("客単価", format_currency(summary["average_ticket"]))

    tab1, tab2, tab3 = st.tabs(["一覧", "日別・人気", "再計算チェック"])

    with tab1:
        for entry in entries:
            with st.container():
                cols = st.columns([3, 2])
                with cols[0]:
                    st.write(format_timestamp(entry.timestamp))
                with cols[1]:
                    st.write(f"**{format_currency(entry.final)}**")
                st.caption(
                    f"小計 {format_currency(entry.subtotal)} / 割引 {format_discount(entry.discount)}"
                )
                sets = summarize_for_display(entry.applied_sets)
                st.caption("、".join(sets) if sets else "適用されたセットはありません")
                st.code(str(entry.order), language=None)

    with tab2:
        day = st.date_input("日付", value=None, key="history_day")
        if day:
            day_entries = list(iter_entries_by_day(entries, day.strftime("%Y-%m-%d")))
            st.write(f"{len(day_entries)} 件")
        st.subheader("人気商品")
        for item_id, qty in lazy_top_items(entries, 5):
            name = catalog.find(item_id).map(lambda i: i.name).get_or_else(item_id)
            st.write(f"• **{name}**: {qty}")

    with tab3:
        if st.button("現在の価格で再計算", key="audit"):
            for row in run_history_audit(catalog, entries, service.rules):
                if row["status"] != "ok":
                    st.warning(f"{row['timestamp']}: {row['status']} {row['error'] or ''}")
            st.success("チェック完了")

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label="CSVエクスポート",
            data=export_history_csv(entries),
            file_name=export_filename(),
            mime="text/csv",
        )
    with col2:
        if st.button("履歴を削除"):
            service.clear_history()
            st.rerun()
