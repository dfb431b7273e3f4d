#!/usr/bin/env python3
"""
Navigation session visualization using folium maps.
"""

import logging
import folium
from folium.template import Template

from .config import DEFAULT_BBOX_BUFFER
from .metrics import ProgressReport, collect_progress, format_progress
from .navigation import NavigationSession

logger = logging.getLogger(__name__)

PATH_COLOR = "#FF8C00"
ENDPOINT_COLOR = "#cc6600"
WAYPOINT_COLOR = "#000099"
TRAIL_COLOR = "#2E86AB"
PRECISE_COLOR = "#33cc33"
IMPRECISE_COLOR = "#ff0000"


class NavigationLegend(folium.MacroElement):
    """Legend showing the session's progress at the time the map was drawn."""

    def __init__(self, report: ProgressReport):
        super().__init__()
        self.waypoint_number = min(report.waypoint_index + 1, report.waypoint_count)
        self.waypoint_count = report.waypoint_count
        self.travelled = f"{report.travelled:.2f}"
        self.route_complete = report.route_complete

        self._template = Template(
            """
        {% macro html(this, kwargs) %}
        <div id="navigation-legend" style="
            position: fixed;
            bottom: 50px;
            left: 50px;
            width: 230px;
            background-color: white;
            border: 2px solid grey;
            z-index: 9999;
            font-size: 13px;
            padding: 12px;
            font-family: Arial, sans-serif;
            border-radius: 5px;
            box-shadow: 0 2px 5px rgba(0,0,0,0.2);
            box-sizing: border-box;
        ">
            <b>Legend</b><br>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: #FF8C00; font-weight: bold; font-size: 18px;">—</span>
                Path
            </div>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: #2E86AB; font-weight: bold; font-size: 18px;">—</span>
                Travelled ({{ this.travelled }} m)
            </div>
            <div style="margin: 4px 0; line-height: 1.3;">
                {% if this.route_complete %}
                Destination reached
                {% else %}
                Next waypoint: {{ this.waypoint_number }} of {{ this.waypoint_count }}
                {% endif %}
            </div>
        </div>
        {% endmacro %}
        """
        )


def create_session_map(
    session: NavigationSession,
    output_filename: str,
    bbox_buffer: float = DEFAULT_BBOX_BUFFER,
) -> None:
    """
    Create an interactive map of a navigation session and save it as HTML.

    Args:
        session: NavigationSession to draw
        output_filename: Path where HTML map file should be saved
        bbox_buffer: Margin around the path in meters

    Raises:
        ValueError: If the session's path is empty
    """
    path = session.path
    if not path:
        raise ValueError("Cannot create map for empty path")

    south, west, north, east = path.get_bbox(bbox_buffer)
    center_lat = (south + north) / 2
    center_lon = (west + east) / 2

    logger.debug(f"Creating map centered at ({center_lat:.4f}, {center_lon:.4f})")

    session_map = folium.Map(
        location=[center_lat, center_lon],
        tiles=None,
    )

    folium.TileLayer(
        tiles="CartoDB positron",
        attr=(
            "&copy; <a href='https://www.openstreetmap.org/copyright'>OpenStreetMap</a> "
            "contributors &copy; <a href='https://carto.com/attributions'>CARTO</a>"
        ),
        name="Standard",
        control=True,
        show=True,
    ).add_to(session_map)

    folium.TileLayer(
        tiles="https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        attr=(
            "Tiles &copy; Esri &mdash; Source: Esri, i-cubed, USDA, USGS, AEX, GeoEye, "
            "Getmapping, Aerogrid, IGN, IGP, UPR-EGP, and the GIS User Community"
        ),
        name="Satellite",
        control=True,
        show=False,
    ).add_to(session_map)

    folium.LayerControl().add_to(session_map)

    coordinates = [[coord.latitude, coord.longitude] for coord in path]

    folium.PolyLine(
        coordinates,
        color=PATH_COLOR,
        weight=7,
        opacity=0.8,
        popup=path.name or "Path",
        z_index=1,
    ).add_to(session_map)

    folium.CircleMarker(
        [path[0].latitude, path[0].longitude],
        radius=5,
        color=ENDPOINT_COLOR,
        fill=True,
        fill_opacity=1.0,
        popup="Start",
    ).add_to(session_map)

    folium.CircleMarker(
        [path[-1].latitude, path[-1].longitude],
        radius=6,
        color=ENDPOINT_COLOR,
        fill=True,
        fill_opacity=1.0,
        popup="End",
    ).add_to(session_map)

    waypoint = session.current_waypoint
    if waypoint is not None:
        folium.CircleMarker(
            [waypoint.coordinate.latitude, waypoint.coordinate.longitude],
            radius=7,
            color=WAYPOINT_COLOR,
            weight=4,
            fill=False,
            popup=f"Waypoint {waypoint.index + 1}",
        ).add_to(session_map)

    if len(session.position_history) > 1:
        folium.PolyLine(
            [[pos.latitude, pos.longitude] for pos in session.position_history],
            color=TRAIL_COLOR,
            weight=3,
            opacity=0.7,
            popup="Travelled",
            z_index=2,
        ).add_to(session_map)

    report = collect_progress(session)

    position = session.position
    if position is not None:
        folium.Marker(
            [position.latitude, position.longitude],
            popup=folium.Popup(format_progress(report), max_width=400),
            icon=folium.Icon(color="blue", icon="arrow-up", angle=round(session.heading)),
        ).add_to(session_map)

        precision_color = IMPRECISE_COLOR if session.imprecise else PRECISE_COLOR
        folium.Circle(
            [position.latitude, position.longitude],
            radius=session.tracker.accuracy or 0.0,
            color=precision_color,
            weight=3,
            fill=True,
            fill_color=precision_color,
            fill_opacity=0.4,
        ).add_to(session_map)

    session_map.add_child(NavigationLegend(report))

    session_map.fit_bounds([[south, west], [north, east]])
    session_map.save(output_filename)

    logger.debug(
        f"Map saved to {output_filename} at waypoint {report.waypoint_index + 1}/{report.waypoint_count}"
    )
