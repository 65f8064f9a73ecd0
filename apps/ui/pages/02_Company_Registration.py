import streamlit as st

from apps.ui.uploads import to_uploaded
from core.errors import IntakeError
from services.factory import build_workflow

st.set_page_config(page_title="Company Registration", layout="wide")

st.title("Company Information Form")

if "company_form_key" not in st.session_state:
    st.session_state.company_form_key = 0

n_directors = st.number_input("Number of directors", min_value=1, max_value=10, value=1)
n_pscs = st.number_input("Number of persons with significant control", min_value=0, max_value=10, value=0)

k = st.session_state.company_form_key
with st.form(f"company-{k}"):
    st.subheader("For the Company")
    company_name = st.text_input("Company name *", placeholder="Proposed name for your company")
    office_address = st.text_area("Registered office address *")
    business_activity = st.text_area("Business activity *", placeholder="Nature of business")

    st.subheader("For the Directors")
    directors, director_files = [], {}
    for i in range(int(n_directors)):
        st.markdown(f"**Director {i + 1}**")
        directors.append(
            {
                "home_address": st.text_area("Home address *", key=f"{k}-d{i}_addr"),
                "ni_number": st.text_input("National Insurance (NI) number *", key=f"{k}-d{i}_ni"),
            }
        )
        director_files[f"directors.{i}.passport"] = st.file_uploader(
            "Passport *", type=["pdf", "jpg", "jpeg", "png"], key=f"{k}-d{i}_passport"
        )
        director_files[f"directors.{i}.brp"] = st.file_uploader(
            "BRP (if applicable)", type=["pdf", "jpg", "jpeg", "png"], key=f"{k}-d{i}_brp"
        )

    pscs = []
    if n_pscs:
        st.subheader("Persons with Significant Control")
    for i in range(int(n_pscs)):
        st.markdown(f"**PSC {i + 1}**")
        pscs.append(
            {
                "name": st.text_input("Name *", key=f"{k}-p{i}_name"),
                "address": st.text_area("Address *", key=f"{k}-p{i}_addr"),
                "nature_of_control": st.text_input("Nature of control *", key=f"{k}-p{i}_noc"),
            }
        )
    submitted = st.form_submit_button("Submit")

if submitted:
    data = {
        "company_name": company_name,
        "office_address": office_address,
        "business_activity": business_activity,
        "directors": directors,
        "pscs": pscs,
    }
    files = {slot: to_uploaded(f) for slot, f in director_files.items()}
    with st.spinner("Submitting..."):
        try:
            result = build_workflow().submit_company(data, files)
        except IntakeError as e:
            st.error(f"Submission failed: {e.message}")
        else:
            st.session_state.company_form_key += 1
            st.success(f"Registration received (reference {result.record_id}).")
