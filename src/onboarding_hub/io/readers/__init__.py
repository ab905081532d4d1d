"""Workbook readers."""

from .excel_reader import ExcelReadError, ExcelReader

__all__ = ["ExcelReadError", "ExcelReader"]
