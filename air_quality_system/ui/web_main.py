"""
Web UI module for the Air Quality System.

This module provides a Streamlit-based web interface for the Air Quality
System. After a local login it offers four pages: AQI (current readings and a
24-hour trend for a place), Navigation (cleanest route between two places),
Heatmap (live monitoring stations) and Comparison (yearly PM2.5 of a place for
two years). Results are shown as text, metrics and tables.
"""

import logging
import sys
from pathlib import Path

# Add project root to Python path to enable imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pandas as pd
import streamlit as st

from airquality.air_quality_service import AirQualityService
from airquality.aqi_classifier import AqiClassifier
from airquality.aqi_report import build_report
from airquality.config import AirQualityConfig
from airquality.errors import AirQualityError
from airquality.geocoding_service import GeocodingService
from airquality.route_quality_evaluator import RouteQualityEvaluator
from airquality.routing_service import RoutingService
from airquality.station_service import StationService
from airquality.year_comparison import compare_years

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

PAGES = ["AQI", "Navigation", "Heatmap", "Comparison"]

# Local login flag; there is no authentication backend
if "logged_in" not in st.session_state:
    st.session_state.logged_in = False

# Service clients are created once per browser session
if "config" not in st.session_state:
    st.session_state.config = AirQualityConfig.from_env()
    st.session_state.geocoder = GeocodingService(st.session_state.config)
    st.session_state.air_service = AirQualityService(st.session_state.config)
    st.session_state.evaluator = RouteQualityEvaluator(
        RoutingService(st.session_state.config), st.session_state.air_service
    )

classifier = AqiClassifier()


def place_input(label: str, key: str) -> str:
    """
    Text input with an autocomplete selectbox underneath.

    Returns:
        The selected suggestion's name, or the typed text if none is chosen
    """
    typed = st.text_input(label, key=f"{key}_text")
    suggestions = st.session_state.geocoder.suggest(typed)
    if not suggestions:
        return typed

    labels = ["(as typed)"] + [suggestion.label for suggestion in suggestions]
    choice = st.selectbox("Suggestions", labels, key=f"{key}_choice")
    if choice == "(as typed)":
        return typed
    return suggestions[labels.index(choice) - 1].name


def colored_text(text: str, color: str) -> str:
    """HTML span showing text in a display color."""
    return f'<span style="color:{color}; font-weight:600">{text}</span>'


def render_login() -> None:
    st.header("Login")
    with st.form("login"):
        username = st.text_input("Username")
        submitted = st.form_submit_button("Login")
    if submitted:
        if username.strip():
            st.session_state.logged_in = True
            st.rerun()
        else:
            st.error("Please enter a username")


def render_aqi_page() -> None:
    st.header("Air Quality Index")
    place = place_input("Search for a place", "aqi")
    if not st.button("Show air quality"):
        return

    try:
        point = st.session_state.geocoder.geocode(place)
        report = build_report(st.session_state.air_service, point, place, classifier)
    except AirQualityError as e:
        st.error(str(e))
        return

    st.subheader(f"Air Quality Data for {report.place_name}")
    pm25_col, pm10_col = st.columns(2)
    pm25_col.metric("PM2.5 (µg/m³)", report.current["pm2_5"])
    pm25_col.caption(report.bands["pm2_5"].category)
    pm10_col.metric("PM10 (µg/m³)", report.current["pm10"])
    pm10_col.caption(report.bands["pm10"].category)

    st.dataframe(pd.DataFrame(report.rows()), use_container_width=True)
    st.subheader("24-Hour Air Quality Trend")
    st.dataframe(report.trend, use_container_width=True)


def render_navigation_page() -> None:
    st.header("Navigation")
    start_place = place_input("Start place", "nav_start")
    end_place = place_input("End place", "nav_end")
    if not st.button("Find Route"):
        return

    try:
        start = st.session_state.geocoder.geocode(start_place)
        end = st.session_state.geocoder.geocode(end_place)
    except AirQualityError:
        st.error("Could not find one or both places. Please try again.")
        return

    with st.spinner("Finding the cleanest route..."):
        try:
            selection = st.session_state.evaluator.select_cleanest_route(
                start, end, enable_persistent_logging=True
            )
        except AirQualityError as e:
            st.error(f"Error finding the cleanest route: {e}")
            return

    distance_col, aqi_col = st.columns(2)
    distance_col.metric("Distance (km)", f"{selection.distance_km:.2f}")
    aqi_col.metric("Average AQI", f"{selection.average_aqi:.2f}")
    aqi_col.markdown(
        colored_text(
            classifier.category_label(round(selection.average_aqi)),
            classifier.route_aqi_color(selection.average_aqi),
        ),
        unsafe_allow_html=True,
    )
    st.write(selection.summary())
    st.caption(
        "AQI Scale: 1-2 Good, 2-3 Moderate, 3-4 Unhealthy for Sensitive Groups, "
        "4-5 Unhealthy, 5+ Very Unhealthy"
    )

    with st.expander("Debug Information"):
        st.write(f"Total routes found: {selection.total_routes}")
        rows = []
        for score in selection.scores:
            improvement = score.aqi_improvement_pct(selection.reference_aqi)
            rows.append({
                "Route": "Route 1 (Shortest)" if score.is_reference else f"Route {score.index + 1}",
                "Distance (km)": round(score.route.length_km, 2),
                "Avg AQI": round(score.average_aqi, 2) if score.is_scoreable else None,
                "Distance Increase": f"{score.distance_increase_pct * 100:+.1f}%",
                "AQI Improvement": f"{improvement * 100:.1f}%" if improvement is not None else "",
                "Selected": score.is_selected,
            })
        st.dataframe(rows, use_container_width=True)
        st.json(selection.to_dict())


def render_heatmap_page() -> None:
    st.header("Real-Time Air Quality Stations")
    try:
        stations = StationService(st.session_state.config).live_stations()
    except ValueError as e:
        st.error(f"{e} Station data needs a WAQI API token.")
        return
    except AirQualityError as e:
        st.error(f"Failed to fetch AQI data: {e}")
        return

    rows = []
    for station in stations:
        label, color = classifier.station_band(station.aqi)
        rows.append({**station.to_dict(), "category": label, "color": color})
    st.dataframe(rows, use_container_width=True)
    st.caption(f"{len(stations)} stations")


def render_comparison_page() -> None:
    st.header("AQI Year Comparison")
    st.info("Note: Air quality data is only available from 2022 onwards.")
    place = place_input("Place", "compare")
    year_col1, year_col2 = st.columns(2)
    year1 = year_col1.text_input("First year")
    year2 = year_col2.text_input("Second year")
    if not st.button("Compare"):
        return

    try:
        comparison = compare_years(
            st.session_state.geocoder, st.session_state.air_service, place, year1, year2
        )
    except (AirQualityError, ValueError) as e:
        st.error(str(e) or "Failed to fetch comparison data")
        return

    st.subheader(f"Comparison Results for {comparison.place_name}")
    for column, average in zip(st.columns(2), (comparison.first, comparison.second)):
        column.metric(str(average.year), f"{average.average_pm25:.2f} µg/m³")
        column.markdown(
            f"Category: {colored_text(average.category, classifier.category_color(average.aqi))}",
            unsafe_allow_html=True,
        )
    if comparison.change_pct is not None:
        st.write(f"Change in average PM2.5: {comparison.change_pct * 100:+.1f}%")


def main() -> None:
    """
    Main function that runs the Streamlit web interface.

    Shows the login form until the local login flag is set, then the page
    selected in the sidebar.
    """
    st.set_page_config(page_title="AirTrack Dashboard", layout="wide")
    st.title("AirTrack Dashboard")

    if not st.session_state.logged_in:
        render_login()
        return

    page = st.sidebar.radio("Page", PAGES)
    if st.sidebar.button("Logout"):
        st.session_state.logged_in = False
        st.rerun()

    if page == "AQI":
        render_aqi_page()
    elif page == "Navigation":
        render_navigation_page()
    elif page == "Heatmap":
        render_heatmap_page()
    else:
        render_comparison_page()


if __name__ == "__main__":
    main()
