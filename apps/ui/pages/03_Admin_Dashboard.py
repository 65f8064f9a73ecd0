import streamlit as st

from domain.models import ApplicationStatus
from services import factory
from services.auth.gate import AdminSessionGate, GateState
from services.review.applications import ApplicationReviewService
from services.review.dashboard import DashboardController

st.set_page_config(page_title="Admin Dashboard", layout="wide")

if "dashboard" not in st.session_state:
    gate = AdminSessionGate(factory.get_identity_provider())
    controller = DashboardController(gate, ApplicationReviewService(factory.get_record_store()))
    controller.open()
    st.session_state.dashboard = controller

dashboard: DashboardController = st.session_state.dashboard
state = dashboard.load()

if state.gate is GateState.SIGNED_OUT:
    st.title("Admin sign-in")
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if st.form_submit_button("Sign in"):
            dashboard.sign_in(email, password)
            st.rerun()
    if state.feedback and not state.feedback.ok:
        st.error(f"Sign-in failed: {state.feedback.message}")
    st.stop()

if state.gate is GateState.UNAUTHORIZED:
    st.title("Unauthorized")
    st.warning("Your account is verified but does not have **admin** access.")
    if st.button("Sign out"):
        dashboard.sign_out()
        st.rerun()
    st.stop()

header, logout = st.columns([6, 1])
header.title("Applications")
if logout.button("Sign out"):
    dashboard.sign_out()
    st.rerun()

if state.feedback:
    (st.success if state.feedback.ok else st.error)(state.feedback.message)

if not state.applications:
    st.info("No applications yet.")
    st.stop()

for app in state.applications:
    pick, info, docs, status = st.columns([0.5, 4, 2, 2])
    checked = pick.checkbox(" ", value=app.id in state.selected, key=f"sel-{app.id}")
    if checked != (app.id in state.selected):
        dashboard.toggle(app.id)
    info.markdown(
        f"**{app.full_name}** · {app.company_name or '-'}  \n"
        f"{app.email} · {app.phone or '-'}  \n"
        f"{app.address or '-'}  \n"
        f"_{app.created_at:%d %B %Y %H:%M}_"
    )
    if app.notes:
        info.caption(app.notes)
    if app.passport_url:
        docs.link_button("Passport", app.passport_url)
    if app.bill_url:
        docs.link_button("Proof of address", app.bill_url)

    options = [app.status] + dashboard.next_statuses(app)
    choice = status.selectbox(
        "Status",
        options,
        index=0,
        format_func=lambda s: ApplicationStatus(s).value,
        key=f"status-{app.id}",
    )
    if choice != app.status:
        dashboard.change_status(app.id, choice)
        st.rerun()

st.divider()
st.write(f"{len(state.selected)} selected")
if "confirm_key" not in st.session_state:
    st.session_state.confirm_key = 0
confirm = st.checkbox(
    "I understand deleting is permanent",
    key=f"confirm-delete-{st.session_state.confirm_key}",
)
if st.button("Delete selected", disabled=not state.selected, type="primary"):
    dashboard.delete_selected(confirmed=confirm)
    # every delete needs a fresh confirmation
    st.session_state.confirm_key += 1
    st.rerun()
