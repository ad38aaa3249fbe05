"""
Streamlit Frontend for Finance Tracker

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages in simple language
3. A failed save never clears what is already on screen
4. Visual feedback for all operations

Every page talks to the stores through the components built by
`create_app_components`; errors are shown with `user_message`.
"""

import asyncio
from datetime import date, datetime

import pandas as pd
import streamlit as st

from finance_tracker.config import get_settings, validate_all_settings
from finance_tracker.models import (
    CategoryStatus,
    CategoryType,
    DateRangeFilter,
    TodoSortKey,
    TodoStatus,
    TransactionType,
)
from finance_tracker.orchestrator import AppComponents, create_app_components
from finance_tracker.reports import (
    UNKNOWN_CATEGORY,
    category_name_lookup,
    filter_transactions,
    sort_todos,
    todo_stats,
)
from finance_tracker.services.auth import AuthError, SessionExpiredError
from finance_tracker.services.storage import StorageError
from finance_tracker.stores import FinanceTrackerError, NetworkError, user_message


# Page configuration
st.set_page_config(
    page_title="Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
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


STATUS_LABELS = {
    TodoStatus.PENDING: "⏳ Pending",
    TodoStatus.IN_PROGRESS: "🔧 In progress",
    TodoStatus.COMPLETED: "✅ Completed",
    TodoStatus.URGENT: "🔥 Urgent",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        components = create_app_components(use_storage=False)
        components.storage_fallback = True
        return components


def money(amount) -> str:
    symbol = get_settings().app.currency_symbol
    return f"{symbol}{amount:,.2f}"


def show_error(components: AppComponents, owner_id: str, error: FinanceTrackerError):
    """Show a short message; storage failures also go to the audit log."""
    if isinstance(error, NetworkError):
        run_async(components.audit_logger.log_storage_error(error.action, str(error), owner_id))
    st.error(user_message(error))


def current_user(components: AppComponents):
    """Resolve the signed-in user, forcing logout when the session expired."""
    token = st.session_state.get("auth_token")
    if not token:
        return None
    try:
        return run_async(components.identity.current_user(token))
    except SessionExpiredError:
        st.session_state.auth_token = None
        st.warning("Your session expired. Please sign in again.")
        return None
    except AuthError:
        st.session_state.auth_token = None
        return None


def main():
    """Main application entry point."""
    components = get_components()
    if components.storage_fallback:
        st.warning(
            "⚠️ Google Sheets could not be reached. Running on temporary in-memory "
            "storage: changes will be lost when the app restarts."
        )

    user = current_user(components)
    if user is None:
        render_login_page(components)
        return

    # Sidebar navigation
    st.sidebar.title("💰 Finance Tracker")
    st.sidebar.markdown(f"Signed in as **{user.display_name or user.email}**")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💸 Transactions", "🗂️ Categories", "📈 Reports", "✅ Tasks", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Sign out"):
        run_async(components.identity.sign_out(st.session_state.auth_token))
        st.session_state.auth_token = None
        st.rerun()

    # Route to appropriate page
    if page == "📊 Dashboard":
        render_dashboard_page(components, user.id)
    elif page == "💸 Transactions":
        render_transactions_page(components, user.id)
    elif page == "🗂️ Categories":
        render_categories_page(components, user.id)
    elif page == "📈 Reports":
        render_reports_page(components, user.id)
    elif page == "✅ Tasks":
        render_tasks_page(components, user.id)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_login_page(components: AppComponents):
    """Render the sign-in / sign-up forms."""
    st.title("💰 Finance Tracker")

    sign_in_tab, sign_up_tab = st.tabs(["Sign in", "Create account"])

    with sign_in_tab:
        with st.form("sign_in"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in", type="primary")
        if submitted:
            try:
                session = run_async(components.identity.sign_in(email, password))
                st.session_state.auth_token = session.token
                st.rerun()
            except AuthError as e:
                st.error(str(e))
            except StorageError:
                st.error(NetworkError.default_message)

    with sign_up_tab:
        with st.form("sign_up"):
            display_name = st.text_input("Your name")
            email = st.text_input("Email", key="sign_up_email")
            password = st.text_input("Password", type="password", key="sign_up_password")
            submitted = st.form_submit_button("Create account", type="primary")
        if submitted:
            try:
                session = run_async(components.identity.sign_up(email, password, display_name))
                st.session_state.auth_token = session.token
                st.rerun()
            except AuthError as e:
                st.error(str(e))
            except StorageError:
                st.error(NetworkError.default_message)


def render_dashboard_page(components: AppComponents, owner_id: str):
    """Render the month summary and the recent transactions list."""
    st.title("📊 Dashboard")

    today = date.today()
    col1, col2 = st.columns(2)
    with col1:
        year = st.selectbox("Year", options=list(range(today.year, today.year - 5, -1)))
    with col2:
        month = st.selectbox(
            "Month",
            options=list(range(1, 13)),
            index=today.month - 1,
            format_func=lambda m: date(2000, m, 1).strftime("%B"),
        )

    cursors = st.session_state.setdefault("recent_cursors", [None])

    try:
        view = run_async(components.dashboard.load(owner_id, year, month, cursor=cursors[-1]))
        names = run_async(components.categories.names_by_id(owner_id))
    except FinanceTrackerError as e:
        show_error(components, owner_id, e)
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", money(view.summary.total_income))
    col2.metric("Expenses", money(view.summary.total_expenses))
    col3.metric("Net balance", money(view.summary.net_balance))

    st.markdown("---")
    st.markdown("### Recent transactions")

    if not view.recent.items:
        st.info("No transactions yet. Add one on the Transactions page.")
    else:
        st.dataframe(transactions_frame(view.recent.items, names), use_container_width=True)

    col1, col2 = st.columns(2)
    with col1:
        if len(cursors) > 1 and st.button("⬅️ Newer"):
            cursors.pop()
            st.rerun()
    with col2:
        if view.recent.has_more and st.button("Older ➡️"):
            cursors.append(view.recent.cursor)
            st.rerun()


def transactions_frame(transactions, names: dict[str, str]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Date": txn.date.isoformat(),
                "Type": txn.type.value.title(),
                "Category": names.get(txn.category_id, UNKNOWN_CATEGORY),
                "Description": txn.description,
                "Amount": float(txn.amount),
            }
            for txn in transactions
        ]
    )


def render_transaction_edit_form(components: AppComponents, owner_id: str, txn, groups):
    """Prefilled form that replaces one transaction's fields."""
    st.markdown("### ✏️ Edit transaction")
    choices = groups.for_type(CategoryType(txn.type.value))
    ids = [c.id for c in choices]

    with st.form(f"edit_txn_form_{txn.id}"):
        category = st.selectbox(
            "Category",
            options=choices,
            index=ids.index(txn.category_id) if txn.category_id in ids else 0,
            format_func=lambda c: c.name,
        )
        amount = st.number_input(
            "Amount", min_value=0.0, step=1.0, format="%.2f", value=float(txn.amount)
        )
        description = st.text_input("Description", value=txn.description)
        txn_date = st.date_input("Date", value=txn.date)
        col1, col2 = st.columns(2)
        saved = col1.form_submit_button("💾 Save changes", type="primary")
        cancelled = col2.form_submit_button("Cancel")

    if cancelled:
        st.session_state.editing_txn = None
        st.rerun()
    if saved:
        if category is None:
            st.warning(f"Create an {txn.type.value} category first.")
            return
        try:
            run_async(components.transactions.update(owner_id, txn.id, {
                "type": txn.type.value,
                "category_id": category.id,
                "amount": f"{amount:.2f}",
                "description": description,
                "date": txn_date,
            }))
            st.session_state.editing_txn = None
            st.rerun()
        except FinanceTrackerError as e:
            show_error(components, owner_id, e)


def render_transactions_page(components: AppComponents, owner_id: str):
    """Render the add form and the filtered transaction list."""
    st.title("💸 Transactions")

    try:
        groups = run_async(components.categories.list_categories(owner_id))
    except FinanceTrackerError as e:
        show_error(components, owner_id, e)
        return
    names = category_name_lookup(groups.all())

    with st.expander("➕ Add transaction", expanded=True):
        txn_type = st.radio(
            "Type",
            options=list(TransactionType),
            format_func=lambda t: t.value.title(),
            horizontal=True,
        )
        choices = [c for c in groups.for_type(CategoryType(txn_type.value)) if c.is_active]
        if not choices:
            st.warning(f"Create an {txn_type.value} category first.")
        else:
            with st.form("add_transaction", clear_on_submit=True):
                category = st.selectbox("Category", options=choices, format_func=lambda c: c.name)
                amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
                description = st.text_input("Description")
                txn_date = st.date_input("Date", value=date.today())
                submitted = st.form_submit_button("💾 Save", type="primary")
            if submitted:
                try:
                    run_async(components.transactions.add(owner_id, {
                        "type": txn_type.value,
                        "category_id": category.id,
                        "amount": f"{amount:.2f}",
                        "description": description,
                        "date": txn_date,
                    }))
                    st.success("Transaction saved")
                except FinanceTrackerError as e:
                    show_error(components, owner_id, e)

    st.markdown("---")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        type_filter = st.selectbox(
            "Type",
            options=[None] + list(TransactionType),
            format_func=lambda t: "All types" if t is None else t.value.title(),
        )
    with col2:
        category_filter = st.selectbox(
            "Category",
            options=[None] + groups.all(),
            format_func=lambda c: "All categories" if c is None else c.name,
        )
    with col3:
        date_range = st.selectbox(
            "Date range",
            options=list(DateRangeFilter),
            format_func=lambda r: r.value.title(),
        )
    with col4:
        search = st.text_input("Search")

    try:
        transactions = run_async(components.transactions.list_all(owner_id))
    except FinanceTrackerError as e:
        show_error(components, owner_id, e)
        return

    shown = filter_transactions(
        transactions,
        type=type_filter,
        category_id=category_filter.id if category_filter else None,
        search=search,
        date_range=date_range,
        category_names=names,
    )

    if not shown:
        st.info("No transactions match these filters.")
        return

    editing = next((t for t in shown if t.id == st.session_state.get("editing_txn")), None)
    if editing:
        render_transaction_edit_form(components, owner_id, editing, groups)

    for txn in shown:
        col1, col2, col3, col4 = st.columns([6, 2, 1, 1])
        col1.markdown(
            f"**{names.get(txn.category_id, UNKNOWN_CATEGORY)}** · {txn.date.isoformat()}"
            f"  \n{txn.description}"
        )
        sign = "+" if txn.is_income else "-"
        col2.markdown(f"{sign}{money(txn.amount)}")
        if col3.button("✏️", key=f"edit_txn_{txn.id}"):
            st.session_state.editing_txn = txn.id
            st.rerun()
        if col4.button("🗑️", key=f"delete_txn_{txn.id}"):
            try:
                run_async(components.transactions.delete(owner_id, txn.id))
                st.rerun()
            except FinanceTrackerError as e:
                show_error(components, owner_id, e)


def render_category_edit_form(components: AppComponents, owner_id: str, category):
    """Prefilled form that renames or retypes one category."""
    st.markdown(f"### ✏️ Edit '{category.name}'")
    types = list(CategoryType)
    statuses = list(CategoryStatus)

    with st.form(f"edit_category_form_{category.id}"):
        col1, col2, col3 = st.columns(3)
        name = col1.text_input("Name", value=category.name)
        category_type = col2.selectbox(
            "Type",
            options=types,
            index=types.index(category.type),
            format_func=lambda t: t.value.title(),
        )
        status = col3.selectbox(
            "Status",
            options=statuses,
            index=statuses.index(category.status),
            format_func=lambda s: s.value.title(),
        )
        col1, col2 = st.columns(2)
        saved = col1.form_submit_button("💾 Save changes", type="primary")
        cancelled = col2.form_submit_button("Cancel")

    if cancelled:
        st.session_state.editing_category = None
        st.rerun()
    if saved:
        try:
            run_async(components.categories.update(owner_id, category.id, {
                "name": name,
                "type": category_type.value,
                "status": status.value,
            }))
            st.session_state.editing_category = None
            st.rerun()
        except FinanceTrackerError as e:
            show_error(components, owner_id, e)


def render_categories_page(components: AppComponents, owner_id: str):
    """Render the category form and the two category lists."""
    st.title("🗂️ Categories")

    with st.form("add_category", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        name = col1.text_input("Name")
        category_type = col2.selectbox(
            "Type", options=list(CategoryType), format_func=lambda t: t.value.title()
        )
        status = col3.selectbox(
            "Status", options=list(CategoryStatus), format_func=lambda s: s.value.title()
        )
        submitted = st.form_submit_button("➕ Add category", type="primary")
    if submitted:
        try:
            run_async(components.categories.add(owner_id, {
                "name": name,
                "type": category_type.value,
                "status": status.value,
            }))
            st.success(f"Category '{name}' added")
        except FinanceTrackerError as e:
            show_error(components, owner_id, e)

    try:
        groups = run_async(components.categories.list_categories(owner_id))
    except FinanceTrackerError as e:
        show_error(components, owner_id, e)
        return

    editing = next(
        (c for c in groups.all() if c.id == st.session_state.get("editing_category")), None
    )
    if editing:
        render_category_edit_form(components, owner_id, editing)

    for category_type in CategoryType:
        st.markdown(f"### {category_type.value.title()} categories")
        categories = groups.for_type(category_type)
        if not categories:
            st.caption("None yet")
        for category in categories:
            col1, col2, col3, col4 = st.columns([6, 2, 1, 1])
            col1.markdown(category.name)
            col2.caption(category.status.value)
            if col3.button("✏️", key=f"edit_cat_{category.id}"):
                st.session_state.editing_category = category.id
                st.rerun()
            if col4.button("🗑️", key=f"delete_cat_{category.id}"):
                try:
                    run_async(components.categories.delete(owner_id, category.id))
                    st.rerun()
                except FinanceTrackerError as e:
                    show_error(components, owner_id, e)


def render_reports_page(components: AppComponents, owner_id: str):
    """Render the yearly report charts."""
    st.title("📈 Reports")

    years_back = get_settings().app.report_years_back
    this_year = date.today().year
    year = st.selectbox("Year", options=list(range(this_year, this_year - years_back, -1)))

    try:
        report = run_async(components.reports.load(owner_id, year))
    except FinanceTrackerError as e:
        show_error(components, owner_id, e)
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", money(report.summary.total_income))
    col2.metric("Expenses", money(report.summary.total_expenses))
    col3.metric("Net balance", money(report.summary.net_balance))

    st.markdown("### Monthly trend")
    trend = pd.DataFrame(
        {
            "Income": [float(m.income) for m in report.monthly],
            "Expenses": [float(m.expenses) for m in report.monthly],
            "Net": [float(m.net) for m in report.monthly],
        },
        index=[m.label for m in report.monthly],
    )
    st.line_chart(trend)

    st.markdown("### Cash balance")
    st.bar_chart(
        pd.DataFrame(
            {"Balance": [float(b) for b in report.cash_flow.balance_by_month]},
            index=[m.label for m in report.monthly],
        )
    )

    col1, col2 = st.columns(2)
    for column, title, shares in (
        (col1, "Top expense categories", report.expense_breakdown),
        (col2, "Top income categories", report.income_breakdown),
    ):
        with column:
            st.markdown(f"### {title}")
            if not shares:
                st.caption("No data")
                continue
            st.dataframe(
                pd.DataFrame(
                    [
                        {"Category": s.name, "Amount": float(s.amount), "Share %": s.percentage}
                        for s in shares
                    ]
                ),
                use_container_width=True,
            )

    st.markdown("### Savings plan")
    for allocation in report.savings:
        st.markdown(f"- **{allocation.name}** ({allocation.percentage:g}%): {money(allocation.amount)}")


def render_task_details_form(components: AppComponents, owner_id: str, todo):
    with st.form(f"edit_task_{todo.id}"):
        text = st.text_input("Task", value=todo.text)
        col1, col2 = st.columns(2)
        has_due = col1.checkbox("Has due date", value=todo.due_date is not None)
        due = col2.date_input("Due date", value=todo.due_date or date.today())
        notes = st.text_area("Notes", value=todo.notes)
        saved = st.form_submit_button("💾 Save details")

    if saved:
        try:
            run_async(components.todos.update(owner_id, todo.id, {
                "text": text,
                "notes": notes,
                "due_date": due if has_due else None,
            }))
            st.rerun()
        except FinanceTrackerError as e:
            show_error(components, owner_id, e)


def render_tasks_page(components: AppComponents, owner_id: str):
    """Render the task list with status controls."""
    st.title("✅ Tasks")

    with st.form("add_task", clear_on_submit=True):
        text = st.text_input("New task")
        col1, col2 = st.columns(2)
        has_due = col1.checkbox("Has due date")
        due = col2.date_input("Due date", value=date.today())
        notes = st.text_area("Notes")
        submitted = st.form_submit_button("➕ Add task", type="primary")
    if submitted:
        try:
            run_async(components.todos.add(
                owner_id, text, due_date=due if has_due else None, notes=notes
            ))
        except FinanceTrackerError as e:
            show_error(components, owner_id, e)

    try:
        todos = run_async(components.todos.list_todos(owner_id))
    except FinanceTrackerError as e:
        show_error(components, owner_id, e)
        return

    stats = todo_stats(todos)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total", stats.total)
    col2.metric("Open", stats.open)
    col3.metric("Urgent", stats.urgent)
    col4.metric("Completed", stats.completed)

    col1, col2 = st.columns(2)
    sort_by = col1.selectbox(
        "Sort by", options=list(TodoSortKey), format_func=lambda k: k.value.replace("_", " ").title()
    )
    status_filter = col2.selectbox(
        "Show",
        options=[None] + list(TodoStatus),
        format_func=lambda s: "All" if s is None else STATUS_LABELS[s],
    )

    for todo in sort_todos(todos, sort_by, status_filter):
        col1, col2, col3, col4 = st.columns([1, 6, 3, 1])
        with col1:
            checked = st.checkbox("done", value=todo.completed, key=f"done_{todo.id}",
                                  label_visibility="collapsed")
            if checked != todo.completed:
                try:
                    run_async(components.todos.toggle_completed(owner_id, todo.id))
                    st.rerun()
                except FinanceTrackerError as e:
                    show_error(components, owner_id, e)
        with col2:
            st.markdown(f"~~{todo.text}~~" if todo.completed else todo.text)
            if todo.due_date:
                st.caption(f"Due {todo.due_date.strftime('%d %B %Y')}")
            if todo.notes:
                st.caption(todo.notes)
            with st.expander("Edit details"):
                render_task_details_form(components, owner_id, todo)
            with st.expander("History"):
                for entry in todo.history:
                    stamp = entry.timestamp.strftime("%Y-%m-%d %H:%M")
                    st.caption(f"{stamp} · {STATUS_LABELS[entry.status]} · {entry.note}")
        with col3:
            statuses = list(TodoStatus)
            chosen = st.selectbox(
                "Status",
                options=statuses,
                index=statuses.index(todo.status),
                format_func=lambda s: STATUS_LABELS[s],
                key=f"status_{todo.id}",
                label_visibility="collapsed",
            )
            if chosen != todo.status:
                try:
                    run_async(components.todos.set_status(owner_id, todo.id, chosen))
                    st.rerun()
                except FinanceTrackerError as e:
                    show_error(components, owner_id, e)
        with col4:
            if st.button("🗑️", key=f"delete_todo_{todo.id}"):
                try:
                    run_async(components.todos.delete(owner_id, todo.id))
                    st.rerun()
                except FinanceTrackerError as e:
                    show_error(components, owner_id, e)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Sign-in", "auth"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your "
        "Google Sheets credentials path and spreadsheet id. "
        "See `.env.example` for the required variables."
    )
    st.caption(f"Checked at {datetime.now().strftime('%H:%M:%S')}")


if __name__ == "__main__":
    main()
