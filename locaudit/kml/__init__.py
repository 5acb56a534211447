"""KML formatting utilities."""

from .kml_formatter import (
    KML_MIME_TYPE,
    build_folder,
    build_kml_document,
    build_line_style,
    build_placemark,
    format_coordinate,
    xml_escape,
)

__all__ = [
    "KML_MIME_TYPE",
    "xml_escape",
    "format_coordinate",
    "build_line_style",
    "build_placemark",
    "build_folder",
    "build_kml_document",
]
