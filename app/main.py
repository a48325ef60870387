"""
Streamlit Frontend for Finance Tracker

The user interface students use to record spending and watch budgets.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every number on screen is derived from stored records
3. Clear error messages in simple language
4. Visual feedback for all operations

The UI holds no financial state of its own. It calls the tracker facade
and re-renders from what the tracker returns.
"""

import asyncio
from datetime import date

import streamlit as st

from finance_tracker.config import validate_all_settings
from finance_tracker.models import (
    CATEGORY_COLORS,
    CURRENCIES,
    LANGUAGE_NAMES,
    Category,
    Language,
)
from finance_tracker.orchestrator import FinanceTracker, InsightFlow, create_app_components
from finance_tracker.services.storage import PersistenceWriteFailure
from finance_tracker.validation import InputError


# Page configuration
st.set_page_config(
    page_title="Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_tracker() -> FinanceTracker:
    """Get or create the tracker (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    tracker = get_tracker()
    t = tracker.translate

    for issue in tracker.load_issues:
        if issue.severity != "info":
            st.sidebar.warning(f"{t('recovered_data')}: {issue.message}")

    if not tracker.is_authenticated:
        render_login_page(tracker)
        return

    st.sidebar.title(f"💰 {t('app_title')}")
    st.sidebar.markdown(f"{t('signed_in_as')} **{tracker.user.name}**")
    if st.sidebar.button(t("log_out")):
        run_action(tracker, tracker.logout)
        st.rerun()

    dashboard, history, budgets, report, settings = st.tabs([
        f"📊 {t('tab_dashboard')}",
        f"🧾 {t('tab_history')}",
        f"🎯 {t('tab_budgets')}",
        f"📅 {t('tab_report')}",
        f"⚙️ {t('tab_settings')}",
    ])
    with dashboard:
        render_dashboard(tracker)
    with history:
        render_history(tracker)
    with budgets:
        render_budgets(tracker)
    with report:
        render_report(tracker)
    with settings:
        render_settings(tracker)


def run_action(tracker: FinanceTracker, action, *args, **kwargs):
    """Run a tracker mutation and show any failure as a message."""
    try:
        return action(*args, **kwargs)
    except InputError as e:
        st.error(f"❌ {e}")
    except PersistenceWriteFailure as e:
        st.error(f"❌ {tracker.translate('save_failed')}: {e}")
    return None


def render_login_page(tracker: FinanceTracker):
    """Render the sign-in form."""
    t = tracker.translate
    st.title(f"💰 {t('app_title')}")
    st.markdown(t("sign_in_prompt"))

    with st.form("login"):
        name = st.text_input(t("name"))
        email = st.text_input(t("email"))
        submitted = st.form_submit_button(t("sign_in"))

    if submitted and run_action(tracker, tracker.login, email, name):
        st.rerun()


def render_dashboard(tracker: FinanceTracker):
    """Render totals, the expense form, budget goals and insights."""
    t = tracker.translate
    summary = tracker.dashboard()

    st.markdown(f"## {t('welcome_back')}, {tracker.user.name}")

    col1, col2, col3 = st.columns(3)
    col1.metric(t("total_spent"), tracker.format_amount(summary.total_spent))
    col2.metric(t("expenses"), summary.expense_count)
    col3.metric(t("top_category"), summary.top_category.value if summary.top_category else "-")

    left, right = st.columns([2, 1])

    with left:
        st.markdown(f"### ➕ {t('add_expense')}")
        with st.form("add_expense", clear_on_submit=True):
            amount = st.text_input(t("amount"))
            category = st.selectbox(
                t("category"),
                options=list(Category),
                format_func=lambda c: c.value,
            )
            description = st.text_input(t("description"))
            spent_on = st.date_input(t("date"), value=date.today())
            submitted = st.form_submit_button(t("add"))

        if submitted:
            expense = run_action(tracker, tracker.add_expense, amount, category, description, spent_on)
            if expense:
                st.success(f"✅ {t('added')} {tracker.format_amount(expense.amount)} → {expense.category.value}")

        st.markdown(f"### 🎯 {t('monthly_goals')}")
        for goal in summary.goals:
            label = (
                f"{goal.category.value}: {tracker.format_amount(goal.spent)} "
                f"{t('of')} {tracker.format_amount(goal.limit)}"
            )
            if goal.near_limit:
                label = f"🔴 {label}"
            st.progress(goal.utilization / 100, text=label)

    with right:
        render_insights(tracker)


def render_insights(tracker: FinanceTracker):
    """Render the AI insight panel."""
    t = tracker.translate
    st.markdown(f"### 🤖 {t('insights')}")

    if st.button(t("refresh_insights"), disabled=not tracker.expenses()):
        with st.spinner(t("thinking")):
            run_async(tracker.refresh_insight())

    state = tracker.insight_state
    if state.error == InsightFlow.NOT_CONFIGURED_MESSAGE:
        st.warning(t("insight_not_configured"))
    elif state.error:
        st.warning(t("insight_unavailable"))
    elif state.insight:
        st.markdown(f'<div class="big-number">{state.insight.score:.0f}/100</div>', unsafe_allow_html=True)
        st.markdown(state.insight.summary)
        for tip in state.insight.tips:
            st.markdown(f"- {tip}")
    elif not tracker.expenses():
        st.info(t("add_expense_for_insights"))
    else:
        st.info(t("press_refresh"))


def render_history(tracker: FinanceTracker):
    """Render the expense list."""
    t = tracker.translate
    st.markdown(f"### 🧾 {t('expense_history')}")

    expenses = tracker.expenses()
    if not expenses:
        st.info(t("no_expenses"))
        return

    for expense in expenses:
        col1, col2, col3, col4 = st.columns([2, 2, 4, 1])
        col1.markdown(expense.date.strftime("%d %b %Y"))
        col2.markdown(
            f'<span style="color:{CATEGORY_COLORS[expense.category]}">{expense.category.value}</span>',
            unsafe_allow_html=True,
        )
        col3.markdown(f"{tracker.format_amount(expense.amount)} {expense.description}")
        if col4.button("🗑️", key=f"delete_{expense.id}"):
            run_action(tracker, tracker.remove_expense, expense.id)
            st.rerun()


def render_budgets(tracker: FinanceTracker):
    """Render the budget editor."""
    t = tracker.translate
    st.markdown(f"### 🎯 {t('tab_budgets')}")

    for budget in tracker.budgets():
        col1, col2, col3 = st.columns([2, 2, 1])
        col1.markdown(f"**{budget.category.value}**")
        col1.progress(
            tracker.utilization(budget.category) / 100,
            text=f"{t('spent')} {tracker.format_amount(tracker.spent_by_category(budget.category))}",
        )
        new_limit = col2.text_input(
            t("limit"),
            value=str(budget.limit),
            key=f"limit_{budget.category.value}",
        )
        if col3.button(t("save"), key=f"save_{budget.category.value}"):
            if run_action(tracker, tracker.set_budget_limit, budget.category, new_limit):
                st.success(f"✅ {budget.category.value}: {t('limit_updated')}")

    st.markdown("---")
    if st.button(t("reset_defaults")):
        run_action(tracker, tracker.reset_budgets)
        st.rerun()


def render_report(tracker: FinanceTracker):
    """Render the monthly report."""
    t = tracker.translate
    st.markdown(f"### 📅 {t('monthly_report')}")

    periods = tracker.available_periods()
    if not periods:
        st.info(t("nothing_recorded"))
        return

    period = st.selectbox(t("month"), options=periods, format_func=lambda p: p.label)
    report = tracker.monthly_report(period)

    st.metric(t("spent_this_month"), tracker.format_amount(report.total))
    if report.over_budget:
        st.error(f"{t('over_budget')}: " + ", ".join(c.value for c in report.over_budget))

    st.bar_chart({line.category.value: float(line.spent) for line in report.lines})

    for line in report.lines:
        limit = tracker.format_amount(line.limit) if line.limit is not None else "-"
        st.markdown(
            f"- **{line.category.value}**: {tracker.format_amount(line.spent)} {t('of')} {limit} "
            f"({line.utilization:.0f}%)"
        )


def render_settings(tracker: FinanceTracker):
    """Render currency, language and connection status."""
    t = tracker.translate
    st.markdown(f"### ⚙️ {t('tab_settings')}")

    current = tracker.settings
    codes = [c.code for c in CURRENCIES]
    currency_code = st.selectbox(
        t("currency"),
        options=codes,
        index=codes.index(current.currency.code),
        format_func=lambda code: next(f"{c.symbol} {c.name} ({c.code})" for c in CURRENCIES if c.code == code),
    )
    languages = list(Language)
    language = st.selectbox(
        t("language"),
        options=languages,
        index=languages.index(current.language),
        format_func=lambda lang: LANGUAGE_NAMES[lang],
    )
    if st.button(t("save_settings")):
        if run_action(tracker, tracker.update_settings, currency_code, language):
            st.success(f"✅ {t('settings_saved')}")
            st.rerun()

    st.markdown("---")
    st.markdown(f"### {t('connection_status')}")

    status = validate_all_settings()
    services = [
        ("Local storage", "storage"),
        ("Gemini (AI insights)", "gemini"),
        ("Application", "app"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - {t('configured')}")
        else:
            error = status.get(f"{key}_error", t("not_configured"))
            st.error(f"❌ {name} - {error}")

    st.markdown(f"### {t('recent_activity')}")
    for event in tracker.recent_activity(10):
        st.caption(f"{event.timestamp:%H:%M:%S} {event.event_type.value}")


if __name__ == "__main__":
    main()
