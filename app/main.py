import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging
from datetime import datetime, timezone

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from networth.async_reports import account_changes
from networth.charts import (
    RANGE_PRESETS,
    account_history,
    net_worth_series,
    range_start_for,
    synthesize_chart_series,
)
from networth.config import configure_logging, get_settings
from networth.domain import AccountType, Ledger, TransactionType
from networth.events import (
    BALANCE_ALERT,
    LEDGER_CHANGED,
    EventBus,
    check_balance_handler,
    persist_handler,
)
from networth.exchange import export_data, import_bytes
from networth.series import accounts_with_balances
from networth.storage import LedgerStore, StorageError
from networth.transforms import (
    LedgerError,
    add_account,
    add_transaction,
    balance_baseline,
    clear_all,
    delete_account,
    delete_transaction,
    record_changed_balances,
    update_account,
)

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger("networth.app")

st.set_page_config(page_title="Net Worth Tracker", layout="wide")

store = LedgerStore(settings.data_path)

if "bus" not in st.session_state:
    bus = EventBus()
    bus.subscribe(LEDGER_CHANGED, persist_handler(store))
    bus.subscribe(BALANCE_ALERT, check_balance_handler)
    st.session_state.bus = bus

if "ledger" not in st.session_state:
    try:
        source = store if store.path.exists() else LedgerStore(settings.seed_path)
        st.session_state.ledger = source.load()
    except StorageError as e:
        logger.error("could not load ledger: %s", e)
        st.error(f"Could not load saved data: {e}")
        st.session_state.ledger = Ledger()


def commit(ledger, reason: str) -> None:
    st.session_state.ledger = ledger
    st.session_state.bus.publish(LEDGER_CHANGED, {"ledger": ledger, "reason": reason})


def money(amount: float) -> str:
    return f"{amount:,.2f} {settings.currency}"


ledger = st.session_state.ledger
accounts = ledger.accounts
account_names = {a.id: a.name for a in accounts}

current = {
    a.id: value for a, value in accounts_with_balances(accounts, ledger.balances, ledger.transactions)
}


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "💳 Accounts", "📝 Record Balances", "🧾 Transactions", "📈 History", "⚙️ Settings"]
)

if menu == "🏠 Overview":
    st.title("🏠 Net Worth")
    points = net_worth_series(accounts, ledger.balances, ledger.transactions)

    if not points:
        st.info("No data available for net worth tracking. Record a balance to get started.")
    else:
        latest, first = points[-1], points[0]
        change = latest.net_worth - first.net_worth
        change_pct = change / abs(first.net_worth) * 100 if first.net_worth != 0 else 0.0

        k1, k2, k3, k4 = st.columns(4)
        with k1:
            st.metric("Current Net Worth", money(latest.net_worth))
        with k2:
            st.metric("Total Assets", money(latest.assets))
        with k3:
            st.metric("Total Liabilities", money(latest.liabilities))
        with k4:
            st.metric("Change", money(change), delta=f"{change_pct:+.1f}%")

        df_nw = pd.DataFrame([
            {"date": p.date, "Assets": p.assets, "Liabilities": p.liabilities, "Net Worth": p.net_worth}
            for p in points
        ])
        fig = go.Figure()
        for column in ("Assets", "Liabilities", "Net Worth"):
            fig.add_trace(go.Scatter(x=df_nw["date"], y=df_nw[column], mode="lines+markers", name=column))
        fig.update_layout(title="Net Worth Over Time", template="plotly_dark", margin=dict(t=40, b=10, l=10, r=10))
        st.plotly_chart(fig, use_container_width=True)

    if accounts:
        names = [a.name for a in accounts]
        values = [current[a.id] for a in accounts]
        fig_bal = px.bar(
            x=names,
            y=values,
            color=[a.type for a in accounts],
            labels={"x": "Account", "y": f"Balance ({settings.currency})", "color": "Type"},
            title="Current Balances",
            template="plotly_dark",
        )
        st.plotly_chart(fig_bal, use_container_width=True)

        threshold = settings.balance_alert_threshold
        for a, value in zip(accounts, values):
            if a.type != AccountType.ASSET:
                continue
            for result in st.session_state.bus.publish(
                BALANCE_ALERT, {"balance": value, "threshold": threshold, "account_name": a.name}
            ):
                if result.get("alert"):
                    st.warning(result["alert"])

elif menu == "💳 Accounts":
    st.title("💳 Accounts")

    with st.form("add_account", clear_on_submit=True):
        c1, c2, c3 = st.columns(3)
        name = c1.text_input("Name")
        category = c2.text_input("Category", value="Bank")
        acc_type = c3.selectbox("Type", [AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY])
        if st.form_submit_button("Add account") and name:
            commit(add_account(ledger, name=name, category=category, type=acc_type), "add_account")
            st.success(f"Account {name} added")
            st.rerun()

    for a in accounts:
        with st.expander(f"{a.name} · {money(current[a.id])}"):
            c1, c2, c3 = st.columns(3)
            new_name = c1.text_input("Name", value=a.name, key=f"name_{a.id}")
            new_category = c2.text_input("Category", value=a.category, key=f"cat_{a.id}")
            types = [AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY]
            new_type = c3.selectbox(
                "Type", types, index=types.index(a.type) if a.type in types else 0, key=f"type_{a.id}"
            )
            b1, b2 = st.columns(2)
            if b1.button("Save", key=f"save_{a.id}"):
                commit(
                    update_account(ledger, a.id, name=new_name, category=new_category, type=new_type),
                    "update_account",
                )
                st.rerun()
            if b2.button("Delete", key=f"delete_{a.id}"):
                commit(delete_account(ledger, a.id), "delete_account")
                st.rerun()

elif menu == "📝 Record Balances":
    st.title("📝 Record Balances")

    if not accounts:
        st.info("Add an account first.")
    else:
        day = st.date_input("Date", value=datetime.now(timezone.utc).date())
        baseline = balance_baseline(ledger, day)
        st.caption("Accounts left at the balance carried into this day are not recorded.")
        with st.form("record_balances"):
            replace_existing = st.checkbox("Replace balances already recorded that day")
            amounts = {
                a.id: st.number_input(
                    a.name, value=float(baseline[a.id]), step=0.01, format="%.2f", key=f"bal_{a.id}_{day}"
                )
                for a in accounts
            }
            if st.form_submit_button("Save balances"):
                try:
                    updated = record_changed_balances(
                        ledger, amounts, at=day, replace_existing=replace_existing
                    )
                except LedgerError as e:
                    st.error(f"Could not record balances: {e}")
                else:
                    if updated is ledger:
                        st.info("No balances changed.")
                    else:
                        commit(updated, "record_balances")
                        st.success(f"Balances saved for {day.isoformat()}")
                        st.rerun()

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")

    with st.form("add_transaction", clear_on_submit=True):
        c1, c2, c3 = st.columns(3)
        tx_type = c1.selectbox("Type", [TransactionType.EXPENSE, TransactionType.INCOME])
        amount = c2.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
        tx_day = c3.date_input("Date", value=datetime.now(timezone.utc).date())
        c4, c5, c6 = st.columns(3)
        description = c4.text_input("Description")
        category = c5.text_input("Category")
        options = ["(none)"] + [a.id for a in accounts]
        account_id = c6.selectbox("Account", options, format_func=lambda v: account_names.get(v, v))
        if st.form_submit_button("Add transaction") and amount > 0:
            when = datetime.combine(tx_day, datetime.now(timezone.utc).time(), tzinfo=timezone.utc)
            commit(
                add_transaction(
                    ledger,
                    amount=amount,
                    type=tx_type,
                    description=description,
                    category=category,
                    account_id=None if account_id == "(none)" else account_id,
                    date=when,
                ),
                "add_transaction",
            )
            st.rerun()

    if not ledger.transactions:
        st.info("No transactions to display.")
    else:
        df_tx = pd.DataFrame([
            {
                "id": t.id,
                "date": t.date,
                "description": t.description,
                "category": t.category,
                "account": account_names.get(t.account_id, "-"),
                "amount": t.amount if t.type == TransactionType.INCOME else -t.amount,
            }
            for t in ledger.transactions
        ]).sort_values("date", ascending=False)

        st.dataframe(
            df_tx.drop(columns=["id"]).assign(
                date=lambda x: x["date"].dt.strftime("%Y-%m-%d %H:%M"),
                amount=lambda x: x["amount"].map(money),
            ),
            use_container_width=True,
        )
        st.download_button("⬇ Download CSV", df_tx.to_csv(index=False), file_name="transactions.csv")

        to_delete = st.selectbox(
            "Delete transaction",
            ["-"] + list(df_tx["id"]),
            format_func=lambda v: v if v == "-" else f"{df_tx.set_index('id').loc[v, 'description']} ({v[:8]})",
        )
        if to_delete != "-" and st.button("Delete"):
            commit(delete_transaction(ledger, to_delete), "delete_transaction")
            st.rerun()

elif menu == "📈 History":
    st.title("📈 Historical Tracking")

    preset = st.selectbox(
        "Date range", RANGE_PRESETS, index=RANGE_PRESETS.index(settings.default_range)
    )
    range_start = range_start_for(preset)
    chart_points = synthesize_chart_series(accounts, ledger.balances, ledger.transactions, range_start)

    if not chart_points:
        st.info("No balance history in this range.")
    else:
        changes = asyncio.run(account_changes(accounts, ledger.balances, ledger.transactions, range_start))
        tracked = [a for a in accounts if a.id in changes]

        cols = st.columns(min(len(tracked), 4) or 1)
        for i, a in enumerate(tracked):
            change, pct = changes[a.id]
            history = account_history(chart_points, a.id)
            cols[i % len(cols)].metric(a.name, money(history[-1].amount), delta=f"{money(change)} ({pct:+.1f}%)")

        df_hist = pd.DataFrame([
            {"date": p.date, "amount": p.amount, "account": account_names.get(p.account_id, p.account_id)}
            for p in chart_points
        ])
        fig = px.line(
            df_hist.sort_values("date"),
            x="date",
            y="amount",
            color="account",
            markers=True,
            title="Balance History",
            template="plotly_dark",
        )
        st.plotly_chart(fig, use_container_width=True)

        amounts = df_hist.groupby("account")["amount"]
        summary = pd.DataFrame({
            "min": amounts.min(),
            "max": amounts.max(),
            "volatility": amounts.apply(lambda s: float(np.std(s.to_numpy()))),
        })
        st.table(summary.round(2))

elif menu == "⚙️ Settings":
    st.title("⚙️ Settings")

    st.header("Export")
    st.download_button(
        "⬇ Download backup",
        export_data(ledger),
        file_name=f"networth-backup-{datetime.now(timezone.utc):%Y-%m-%d}.json",
        mime="application/json",
    )

    st.header("Import")
    uploaded = st.file_uploader("Backup file", type=["json"])
    if uploaded is not None and st.button("Import and replace current data"):
        result = import_bytes(uploaded.getvalue())
        if result.is_right():
            commit(result.get_or_else(ledger), "import")
            st.success("Data imported")
            st.rerun()
        else:
            st.error(result.get_error()["message"])

    st.header("Danger zone")
    if st.button("Clear all data"):
        st.session_state.ledger = clear_all(ledger)
        store.clear()
        st.rerun()
