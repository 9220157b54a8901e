"""
Raw data export: column descriptors, row builders and the CSV exporter.
"""
from .columns import ColumnSpec, TabExport, build_tab_export, export_filename, render_table
from .exporter import TabularExporter, serialize_rows

__all__ = [
    "ColumnSpec",
    "TabExport",
    "TabularExporter",
    "build_tab_export",
    "export_filename",
    "render_table",
    "serialize_rows",
]
