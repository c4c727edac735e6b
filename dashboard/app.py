"""Streamlit dashboard for the vacation bid allocator."""

from __future__ import annotations

import datetime
from typing import Any, Dict, List, Optional

import requests
import streamlit as st

# Streamlit puts this directory on sys.path.
from calendar_view import grant_frame, grants_per_requester, occupancy_frame

# ==========================================
# Configuration & Constants
# ==========================================
# Point this to your local FastAPI server
API_BASE_URL = "http://127.0.0.1:8000"

st.set_page_config(
    page_title="Vacation Bidding",
    page_icon="🗓️",
    layout="wide",
)

# ==========================================
# API Helper Functions
# ==========================================
def submit_bid(
    requester_id: str,
    name: str,
    seniority: int,
    location: str,
    vacation_dates: List[str],
) -> Optional[Dict[str, Any]]:
    """Calls the backend bid ingestion endpoint."""
    try:
        response = requests.post(
            f"{API_BASE_URL}/bids",
            json={
                "requester_id": requester_id,
                "name": name,
                "seniority": seniority,
                "location": location,
                "vacation_dates": vacation_dates,
            },
            timeout=5,
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Bid submission failed: {e}")
        return None


def run_allocation(year: int, preview: bool) -> Optional[Dict[str, Any]]:
    """Calls the backend allocation trigger."""
    try:
        response = requests.post(
            f"{API_BASE_URL}/allocations/{year}",
            params={"preview": str(preview).lower()},
            timeout=30,
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Allocation failed: {e}")
        return None


# ==========================================
# UI Page Functions
# ==========================================
def render_bid_page() -> None:
    st.header("✈️ Submit Vacation Bid")
    st.markdown("Up to 14 dates per location. A new bid replaces your previous one.")

    col1, col2 = st.columns(2)
    with col1:
        requester_id = st.text_input("Requester ID")
        name = st.text_input("Name")
    with col2:
        seniority = st.number_input("Seniority (1 = most senior)", min_value=1, value=1)
        location = st.text_input("Location")

    raw_dates = st.text_area("Vacation dates (one YYYY-MM-DD per line)")

    if st.button("Submit Bid", type="primary"):
        dates = [line for line in raw_dates.splitlines() if line.strip()]
        result = submit_bid(requester_id, name, int(seniority), location, dates)
        if result:
            st.success(result.get("message", "Saved"))


def render_allocation_page() -> None:
    st.header("🗓️ Yearly Allocation")
    st.markdown("Allocate every bid by seniority, bumping and backfilling as needed.")

    col1, col2 = st.columns(2)
    with col1:
        year = st.number_input("Year", min_value=2000, max_value=2100, value=datetime.date.today().year)
    with col2:
        preview = st.checkbox("Preview only (do not overwrite bids)", value=True)

    if st.button("Run Allocation", type="primary"):
        with st.spinner("Allocating..."):
            result = run_allocation(int(year), preview)

        if result:
            calendar = result.get("calendar", {})
            metric_col1, metric_col2 = st.columns(2)
            metric_col1.metric("Grants", result.get("grant_count", 0))
            metric_col2.metric("Unaccommodated", len(result.get("unaccommodated", [])))

            st.write("### Slot Occupancy")
            st.dataframe(occupancy_frame(calendar, result["slot_capacity"]), use_container_width=True)

            st.write("### Grants by Requester")
            st.dataframe(grants_per_requester(calendar), use_container_width=True)
            st.dataframe(grant_frame(calendar), use_container_width=True)

            unaccommodated = result.get("unaccommodated", [])
            if unaccommodated:
                st.write("### Requests Without a Seat")
                st.dataframe(unaccommodated, use_container_width=True)


# ==========================================
# Main App Router
# ==========================================
def main() -> None:
    st.sidebar.title("Vacation Bidding")
    st.sidebar.markdown("---")

    page = st.sidebar.radio("Navigation", ["Submit Bid", "Allocation"])

    if page == "Submit Bid":
        render_bid_page()
    elif page == "Allocation":
        render_allocation_page()


if __name__ == "__main__":
    main()
