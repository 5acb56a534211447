"""Minimal KML 2.2 formatter for truth-to-reported error vectors."""

from __future__ import annotations

from typing import Mapping, Sequence
from xml.sax.saxutils import escape

from locaudit.projection import VectorRecord

KML_NAMESPACE = "http://www.opengis.net/kml/2.2"
KML_MIME_TYPE = "application/vnd.google-earth.kml+xml;charset=utf-8"
STYLE_OK = "lineOk"
STYLE_BAD = "lineBad"


def xml_escape(value: object) -> str:
    """Escape text for XML element content, quotes included."""
    if value is None:
        return ""
    return escape(str(value), {'"': "&quot;", "'": "&apos;"})


def format_coordinate(lon_deg: float, lat_deg: float, alt_m: float) -> str:
    """Format a KML lon,lat,alt tuple."""
    return f"{lon_deg},{lat_deg},{alt_m}"


def build_line_style(style_id: str, color_abgr: str, width: int = 3) -> str:
    """Build a shared LineStyle element (KML colors are aabbggrr)."""
    return f'  <Style id="{style_id}"><LineStyle><color>{color_abgr}</color><width>{width}</width></LineStyle></Style>'


def build_placemark(vector: VectorRecord) -> str:
    """Build a LineString Placemark from the truth point to the reported fix."""
    style = STYLE_OK if vector.passed else STYLE_BAD
    start = format_coordinate(vector.truth_lon, vector.truth_lat, vector.truth_altitude_m)
    end = format_coordinate(vector.reported_lon, vector.reported_lat, vector.reported_altitude_m)
    return "\n".join(
        [
            "    <Placemark>",
            f"      <name>{xml_escape(vector.label)}</name>",
            f"      <styleUrl>#{style}</styleUrl>",
            "      <LineString>",
            "        <tessellate>1</tessellate>",
            "        <altitudeMode>absolute</altitudeMode>",
            f"        <coordinates>{start} {end}</coordinates>",
            "      </LineString>",
            "    </Placemark>",
        ]
    )


def build_folder(name: str, vectors: Sequence[VectorRecord]) -> str:
    """Build a Folder holding one Placemark per vector."""
    parts = ["  <Folder>", f"    <name>{xml_escape(name)}</name>"]
    parts.extend(build_placemark(vector) for vector in vectors)
    parts.append("  </Folder>")
    return "\n".join(parts)


def build_kml_document(groups: Mapping[str, Sequence[VectorRecord]], doc_name: str) -> str:
    """Build a complete KML document with one Folder per group."""
    pieces = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<kml xmlns="{KML_NAMESPACE}">',
        "<Document>",
        f"  <name>{xml_escape(doc_name)}</name>",
        build_line_style(STYLE_OK, "ff00ff00"),
        build_line_style(STYLE_BAD, "ff0000ff"),
    ]
    pieces.extend(build_folder(name, vectors) for name, vectors in groups.items())
    pieces.append("</Document>")
    pieces.append("</kml>")
    return "\n".join(pieces)
