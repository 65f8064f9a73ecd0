import streamlit as st

from apps.ui.uploads import to_uploaded
from core.errors import IntakeError
from services.factory import build_workflow

st.set_page_config(page_title="Apply", layout="wide")

st.title("Application Form")
st.caption("Fields marked * are required.")

if "apply_form_key" not in st.session_state:
    st.session_state.apply_form_key = 0

with st.form(f"apply-{st.session_state.apply_form_key}"):
    company_name = st.text_input("Company name *")
    full_name = st.text_input("Full name *")
    email = st.text_input("Email *")
    phone = st.text_input("Phone")
    address = st.text_area("Address *")
    notes = st.text_area("Notes")
    passport = st.file_uploader("Passport *", type=["pdf", "jpg", "jpeg", "png"])
    bill = st.file_uploader("Proof of address (utility bill) *", type=["pdf", "jpg", "jpeg", "png"])
    submitted = st.form_submit_button("Submit application")

if submitted:
    data = {
        "company_name": company_name,
        "full_name": full_name,
        "email": email,
        "phone": phone,
        "address": address,
        "notes": notes,
    }
    files = {"passport": to_uploaded(passport), "bill": to_uploaded(bill)}
    with st.spinner("Submitting..."):
        try:
            result = build_workflow().submit_application(data, files)
        except IntakeError as e:
            st.error(f"Submission failed: {e.message}")
        else:
            # a new form key resets every input
            st.session_state.apply_form_key += 1
            st.success(f"Application received (reference {result.record_id}).")
