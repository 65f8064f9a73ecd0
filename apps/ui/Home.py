import streamlit as st

from core.logging import configure_logging

configure_logging()

st.set_page_config(page_title="Company Intake", layout="wide")

st.title("Company Intake Portal")

st.markdown(
    """
Welcome. We will assist you with the establishment of your new venture.

Use the sidebar to:

- Submit an application with your passport and proof of address
- Register a company with its directors and persons with significant control
- Staff: review submitted applications in the admin dashboard
"""
)
