"""Streamlit station map and nearest-stations list."""

from __future__ import annotations

import pandas as pd
import pydeck as pdk
import streamlit as st

from sports_radio import config
from sports_radio.locator import (
    LocatorContext,
    browse_all,
    lookup_by_location,
)
from sports_radio.mapview import FOCUS_ZOOM, USER_COLOR, build_markers, find_marker, zoom_for_results
from sports_radio.models import GeoPoint
from sports_radio.ranking import (
    FOOTBALL,
    MENS_BASKETBALL,
    VOLLEYBALL,
    WOMENS_BASKETBALL,
    SportFilters,
)
from sports_radio.render import render_fallback_list, render_station_list
from sports_radio.stations import load_stations

# --- Page config ---
st.set_page_config(
    page_title="Nebraska Sports Radio",
    page_icon="📻",
    layout="wide",
)

st.markdown("""
<style>
    .station-item { padding: 8px 10px; border-bottom: 1px solid #eee; }
    .station-item.nearest { background: #fff5f5; }
    .station-freq { font-weight: bold; margin-right: 8px; }
    .station-call { margin-right: 8px; }
    .station-distance { float: right; color: #666; }
    .distance-short { display: none; }
    .station-sport { font-size: 0.75rem; padding: 1px 6px; margin-right: 4px;
                     border-radius: 8px; background: #eee; }
    .station-sport.football { background: #d00000; color: white; }
    .station-sport.volleyball { background: #333; color: white; }
    .station-sport.men-s-basketball { background: #D2B48C; }
    .station-sport.women-s-basketball { background: #FFB6D9; }
</style>
""", unsafe_allow_html=True)


# --- Data loading ---
@st.cache_data
def _stations():
    return load_stations()


stations = _stations()

if "context" not in st.session_state:
    st.session_state.context = LocatorContext()
context: LocatorContext = st.session_state.context

# --- Sidebar ---
with st.sidebar:
    st.title("📻 Sports Radio")
    st.markdown("---")

    st.markdown("**Sports**")
    context.filters = SportFilters(
        football=st.checkbox(FOOTBALL, value=True),
        volleyball=st.checkbox(VOLLEYBALL, value=True),
        mens_basketball=st.checkbox(MENS_BASKETBALL, value=True),
        womens_basketball=st.checkbox(WOMENS_BASKETBALL, value=True),
    )

    st.markdown("---")
    use_location = st.checkbox("Find Nearest Stations", value=False)
    lat = st.number_input("Latitude", value=config.DEFAULT_CENTER[0], format="%.4f")
    lon = st.number_input("Longitude", value=config.DEFAULT_CENTER[1], format="%.4f")
    context.sort_key = st.radio("Sort by", ["distance", "signal"], horizontal=True)

# --- Lookup ---
if use_location:
    result = lookup_by_location(context, stations, point=GeoPoint(lat, lon))
else:
    result = browse_all(context, stations)

st.title("Nebraska Sports Radio")
st.caption(result.message)

markers = build_markers(stations, context.filters)
focused = None
if result.results:
    focused = st.selectbox(
        "Show on map",
        result.results,
        index=None,
        format_func=lambda r: f"{r.dial} {r.call_sign} ({r.city})",
        placeholder="Pick a station from the list",
    )
focus_marker = find_marker(markers, focused.latitude, focused.longitude) if focused else None

col_map, col_list = st.columns([3, 2])

# --- Map ---
with col_map:
    marker_df = pd.DataFrame([
        {
            "latitude": m.latitude,
            "longitude": m.longitude,
            "color": m.rgb,
            "popup": m.popup_html,
        }
        for m in markers
    ])

    layers = [
        pdk.Layer(
            "ScatterplotLayer",
            data=marker_df,
            get_position=["longitude", "latitude"],
            get_fill_color="color",
            get_line_color=[255, 255, 255],
            stroked=True,
            line_width_min_pixels=2,
            radius_min_pixels=6,
            pickable=True,
        ),
    ]

    if context.user_location is not None:
        user = context.user_location
        hex_color = USER_COLOR.lstrip("#")
        layers.append(pdk.Layer(
            "ScatterplotLayer",
            data=pd.DataFrame([{
                "latitude": user.latitude,
                "longitude": user.longitude,
                "popup": "<strong>Your Location</strong>",
            }]),
            get_position=["longitude", "latitude"],
            get_fill_color=[int(hex_color[i:i + 2], 16) for i in (0, 2, 4)],
            radius_min_pixels=8,
            pickable=True,
        ))

    if focus_marker is not None:
        view_state = pdk.ViewState(
            latitude=focus_marker.latitude,
            longitude=focus_marker.longitude,
            zoom=FOCUS_ZOOM,
        )
    elif context.user_location is not None:
        view_state = pdk.ViewState(
            latitude=context.user_location.latitude,
            longitude=context.user_location.longitude,
            zoom=zoom_for_results(context.user_location, result.results),
        )
    else:
        view_state = pdk.ViewState(
            latitude=config.DEFAULT_CENTER[0],
            longitude=config.DEFAULT_CENTER[1],
            zoom=config.DEFAULT_ZOOM,
        )

    st.pydeck_chart(pdk.Deck(
        layers=layers,
        initial_view_state=view_state,
        tooltip={"html": "{popup}"},
        map_style=None,
    ), height=600)

# --- List ---
with col_list:
    if result.used_fallback:
        st.markdown(render_fallback_list(result.fallback), unsafe_allow_html=True)
    else:
        st.markdown(render_station_list(result.results), unsafe_allow_html=True)
