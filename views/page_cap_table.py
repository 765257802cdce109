from __future__ import annotations
from typing import Callable, Optional
import altair as alt
import streamlit as st
from cap_dashboard import money_fmt, NO_SELECTION, FOUNDATION, REGULAR
from cap_dashboard.aggregation import (
    esop_dataframe,
    loan_dataframe,
    ownership_chart_frame,
    round_detail_dataframe,
    shareholder_dataframe,
    summary_drift,
)
from cap_dashboard.commands import (
    AddEsop,
    AddInvestment,
    AddLoan,
    AddRound,
    AddShareClass,
    AddShareholder,
    Command,
    EditInvestment,
    EditShareholder,
)
from cap_dashboard.export import export_investments
from cap_dashboard.loader import CapTableState, DataLoader
from cap_dashboard.models import FundingRound
from cap_dashboard.notices import Notice
from cap_dashboard.selector import SelectorState
from views.common import flush_notices, queue_notices, show_notices


def _run(loader: DataLoader, state: CapTableState, command: Command) -> None:
    outcome, result = loader.execute(state, command)
    queue_notices(result.notices)
    if outcome is not None:
        st.rerun()
    else:
        flush_notices()


def _shareholder_section(state: CapTableState, loader: DataLoader, currency: str):
    st.subheader("👥 Shareholders")
    col_table, col_count = st.columns([3, 1])
    with col_table:
        if state.shareholders:
            st.dataframe(shareholder_dataframe(state.shareholders, currency), use_container_width=True, hide_index=True)
        else:
            st.info("No shareholders added yet")
    col_count.metric("No. of Shareholders", state.shareholder_count)

    chart_df = ownership_chart_frame(state.shareholders)
    if not chart_df.empty and chart_df["Shares"].sum() > 0:
        with st.expander("📈 Ownership"):
            chart = alt.Chart(chart_df).mark_bar().encode(
                x=alt.X("Ownership %:Q", title="Ownership %"),
                y=alt.Y("Shareholder:N", sort="-x", title=None),
                tooltip=["Shareholder", alt.Tooltip("Shares:Q", format=",.0f"), alt.Tooltip("Ownership %:Q", format=".2f")],
            ).properties(height=max(120, 28 * len(chart_df)))
            st.altair_chart(chart, use_container_width=True)

    col_add, col_edit = st.columns(2)
    with col_add.expander("➕ Add Shareholder"):
        with st.form("add_shareholder_form", clear_on_submit=True):
            name = st.text_input("Name")
            contact = st.text_input("Contact")
            if st.form_submit_button("Add Shareholder", type="primary"):
                _run(loader, state, AddShareholder(name=name, contact=contact))
    if state.shareholders:
        with col_edit.expander("✏️ Edit Shareholder"):
            by_id = {s.id: s for s in state.shareholders}
            sid = st.selectbox("Shareholder", list(by_id), format_func=lambda i: by_id[i].name or i, key="edit_shareholder_pick")
            with st.form("edit_shareholder_form"):
                name = st.text_input("Name", value=by_id[sid].name)
                contact = st.text_input("Contact", value=by_id[sid].contact)
                if st.form_submit_button("Save"):
                    _run(loader, state, EditShareholder(shareholder_id=sid, name=name, contact=contact))


def _round_picker(state: CapTableState, loader: DataLoader, bucket: str) -> None:
    selector = state.selector(bucket)
    labels = {NO_SELECTION: "Select a round"}
    labels.update({r.id: r.name for r in selector.rounds})
    options = list(labels)
    current = selector.selected_round_id
    idx = options.index(current) if current in options else 0
    gen_key = f"{bucket}_round_pick_gen"
    gen = st.session_state.get(gen_key, 0)
    choice = st.selectbox("Round", options, index=idx, format_func=lambda i: labels[i], key=f"{bucket}_round_pick_{idx}_{gen}")
    if choice != current:
        result = loader.select_round(state, bucket, choice)
        if not result.ok:
            # failed fetch keeps the old round, so reset the widget to it
            st.session_state[gen_key] = gen + 1
        queue_notices(result.notices)
        st.rerun()


def _investment_forms(state: CapTableState, loader: DataLoader, funding_round: FundingRound, bucket: str) -> None:
    if not state.shareholders:
        st.caption("Add a shareholder before recording investments.")
        return
    holders = {s.id: s.name for s in state.shareholders}
    classes = {"": "Common"}
    classes.update({c.id: c.name for c in state.share_classes})
    col_add, col_edit = st.columns(2)
    with col_add.expander("💵 Add Investment"):
        with st.form(f"{bucket}_add_investment_form", clear_on_submit=True):
            holder = st.selectbox("Shareholder", list(holders), format_func=lambda i: holders[i])
            share_class = st.selectbox("Share Class", list(classes), format_func=lambda i: classes[i])
            shares = st.number_input("Number of Shares", min_value=0.0, value=0.0, step=1.0, format="%f")
            price = st.number_input("Share Price", min_value=0.0, value=0.0, step=0.01, format="%f")
            capital = st.number_input("Capital Invested (0 = shares × price)", min_value=0.0, value=0.0, step=1000.0, format="%f")
            if st.form_submit_button("Add Investment", type="primary"):
                _run(loader, state, AddInvestment(
                    round_id=funding_round.id,
                    shareholder_id=holder,
                    share_class_id=share_class or None,
                    number_of_shares=shares,
                    share_price=price,
                    capital_invested=capital or None,
                ))
    investments = state.selector(bucket).investments
    if investments:
        with col_edit.expander("✏️ Edit Investment"):
            by_id = {inv.id: inv for inv in investments}
            iid = st.selectbox("Investment", list(by_id), format_func=lambda i: f"{by_id[i].shareholder_label} ({by_id[i].number_of_shares:,.0f})", key=f"{bucket}_edit_investment_pick")
            inv = by_id[iid]
            with st.form(f"{bucket}_edit_investment_form"):
                class_keys = list(classes)
                class_idx = class_keys.index(inv.share_class_id) if inv.share_class_id in class_keys else 0
                share_class = st.selectbox("Share Class", class_keys, index=class_idx, format_func=lambda i: classes[i])
                shares = st.number_input("Number of Shares", min_value=0.0, value=float(inv.number_of_shares), step=1.0, format="%f")
                price = st.number_input("Share Price", min_value=0.0, value=float(inv.share_price), step=0.01, format="%f")
                capital = st.number_input("Capital Invested", min_value=0.0, value=float(inv.capital_invested), step=1000.0, format="%f")
                if st.form_submit_button("Save"):
                    _run(loader, state, EditInvestment(
                        investment_id=iid,
                        share_class_id=share_class or None,
                        number_of_shares=shares,
                        share_price=price,
                        capital_invested=capital,
                    ))


def _round_section(state: CapTableState, loader: DataLoader, bucket: str, title: str, stem: Callable[[Optional[FundingRound]], str], currency: str):
    selector = state.selector(bucket)
    is_foundation = bucket == FOUNDATION
    st.subheader(title)

    col_new_round, col_new_class = st.columns(2)
    with col_new_round.expander("➕ Add Foundation Round" if is_foundation else "➕ Add Round"):
        with st.form(f"{bucket}_add_round_form", clear_on_submit=True):
            name = st.text_input("Round name")
            valuation = st.number_input("Valuation", min_value=0.0, value=0.0, step=100000.0, format="%f")
            if st.form_submit_button("Create Round", type="primary"):
                _run(loader, state, AddRound(name=name, valuation=valuation, is_foundation=is_foundation))
    with col_new_class.expander("➕ Add Share Class"):
        with st.form(f"{bucket}_add_share_class_form", clear_on_submit=True):
            class_name = st.text_input("Share class name")
            if st.form_submit_button("Add Share Class"):
                _run(loader, state, AddShareClass(name=class_name))

    col_table, col_value = st.columns([3, 1])
    with col_table:
        _round_picker(state, loader, bucket)
        shown = selector.selected
        if selector.state == SelectorState.INVESTMENTS_LOADING:
            st.caption("Loading round details …")
        if shown is None:
            if selector.state != SelectorState.INVESTMENTS_LOADING:
                st.info(f"Please select or create a {'foundation' if is_foundation else 'funding'} round")
        elif not shown.investments:
            st.caption("No investments in this round yet")
        else:
            st.dataframe(round_detail_dataframe(shown.round, shown.investments, currency), use_container_width=True, hide_index=True)
            with st.expander("🔎 Summary check"):
                drift = summary_drift(shown.round, shown.investments)
                st.caption("Totals come from the stored round summary; loaded rows are shown for comparison only.")
                st.write({k: round(v, 4) for k, v in drift.items()})

        export = export_investments(selector.investments, stem(shown.round if shown else None))
        if export is None:
            if st.button("⬇️ Export to CSV", key=f"{bucket}_export_empty"):
                show_notices([Notice("info", "No data to export", "There is no data available to export")])
        else:
            st.download_button(
                "⬇️ Export to CSV", export.content, file_name=export.file_name, mime=export.mime, key=f"{bucket}_export",
                on_click=queue_notices, args=([export.downloaded_notice()],),
            )

    valuation = shown.round.valuation if shown else 0.0
    col_value.metric("Foundation" if is_foundation else (shown.round.name if shown else "Valuation"), money_fmt(valuation, 0, currency))

    if shown is not None:
        _investment_forms(state, loader, shown.round, bucket)


def _esop_section(state: CapTableState, loader: DataLoader):
    st.subheader("🎯 ESOPs")
    if state.esops:
        st.dataframe(esop_dataframe(state.esops), use_container_width=True, hide_index=True)
    else:
        st.caption("No ESOPs created yet")
    with st.expander("➕ Add ESOP"):
        with st.form("add_esop_form", clear_on_submit=True):
            name = st.text_input("Name")
            total = st.number_input("Total Shares", min_value=0.0, value=0.0, step=1000.0, format="%f")
            vesting = st.text_input("Vesting Period", value="4 years")
            if st.form_submit_button("Add ESOP", type="primary"):
                _run(loader, state, AddEsop(name=name, total_shares=total, vesting_period=vesting))


def _loan_section(state: CapTableState, loader: DataLoader, currency: str):
    st.subheader("🏦 Loans")
    if state.loans:
        st.dataframe(loan_dataframe(state.loans, currency), use_container_width=True, hide_index=True)
    else:
        st.caption("No loans recorded yet")
    with st.expander("➕ Add Loan"):
        with st.form("add_loan_form", clear_on_submit=True):
            name = st.text_input("Name")
            amount = st.number_input("Amount", min_value=0.0, value=0.0, step=1000.0, format="%f")
            rate = st.number_input("Interest Rate (%)", min_value=0.0, value=0.0, step=0.25, format="%f")
            term = st.number_input("Term (Months)", min_value=0, value=12, step=1)
            if st.form_submit_button("Add Loan", type="primary"):
                _run(loader, state, AddLoan(name=name, amount=amount, interest_rate=rate, term_months=int(term)))


def render(state: CapTableState, loader: DataLoader, currency: str = "$"):
    st.title("📊 Cap Table")
    st.markdown("Manage your company's shareholders and funding rounds")
    flush_notices()

    if st.button("🔄 Refresh"):
        queue_notices(loader.refresh(state).notices)
        st.rerun()

    _shareholder_section(state, loader, currency)
    st.divider()
    _round_section(state, loader, FOUNDATION, "🏛️ Foundation Round", lambda r: "foundation-round", currency)
    st.divider()
    _round_section(state, loader, REGULAR, "🚀 Rounds", lambda r: f"round-{r.name if r else 'data'}", currency)
    st.divider()
    _esop_section(state, loader)
    st.divider()
    _loan_section(state, loader, currency)
