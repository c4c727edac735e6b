"""Tabular views over the allocation API payload for the dashboard."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pandas as pd


OCCUPANCY_COLUMNS = ["date", "location", "occupants", "seats_taken", "seats_free"]
GRANT_COLUMNS = ["requester_id", "name", "seniority", "location", "date"]

CalendarPayload = Dict[str, Optional[Dict[str, List[Dict[str, Any]]]]]


def occupancy_frame(calendar: CalendarPayload, capacity: int) -> pd.DataFrame:
    """One row per occupied (date, location) slot, sorted by date then location."""
    rows = []
    for day, by_location in calendar.items():
        if not by_location:
            continue
        for location, occupants in by_location.items():
            rows.append(
                {
                    "date": day,
                    "location": location,
                    "occupants": ", ".join(
                        f"{item['name']} ({item['seniority']})" for item in occupants
                    ),
                    "seats_taken": len(occupants),
                    "seats_free": max(capacity - len(occupants), 0),
                }
            )
    frame = pd.DataFrame(rows, columns=OCCUPANCY_COLUMNS)
    if frame.empty:
        return frame
    frame["date"] = pd.to_datetime(frame["date"])
    return frame.sort_values(["date", "location"]).reset_index(drop=True)


def grant_frame(calendar: CalendarPayload) -> pd.DataFrame:
    """One row per granted (requester, location, date), ordered by seniority."""
    rows = [
        {
            "requester_id": item["requester_id"],
            "name": item["name"],
            "seniority": item["seniority"],
            "location": location,
            "date": day,
        }
        for day, by_location in calendar.items()
        if by_location
        for location, occupants in by_location.items()
        for item in occupants
    ]
    frame = pd.DataFrame(rows, columns=GRANT_COLUMNS)
    if frame.empty:
        return frame
    frame["date"] = pd.to_datetime(frame["date"])
    return frame.sort_values(["seniority", "requester_id", "date"]).reset_index(drop=True)


def grants_per_requester(calendar: CalendarPayload) -> pd.DataFrame:
    """Granted day counts per (requester, location)."""
    grants = grant_frame(calendar)
    if grants.empty:
        return pd.DataFrame(columns=["requester_id", "location", "granted_days"])
    return (
        grants.groupby(["requester_id", "location"], sort=True)
        .size()
        .reset_index(name="granted_days")
    )
