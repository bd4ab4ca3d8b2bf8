"""Export and import functionality for Timesheet."""

from timesheet.export_import.base import Exporter, Importer
from timesheet.export_import.csv_format import CSVExporter
from timesheet.export_import.excel_format import ExcelExporter
from timesheet.export_import.json_format import JSONExporter, JSONImporter

__all__ = [
    "Exporter",
    "Importer",
    "CSVExporter",
    "ExcelExporter",
    "JSONExporter",
    "JSONImporter",
]
