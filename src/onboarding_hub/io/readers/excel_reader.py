"""
Excel workbook reading infrastructure for OnboardingHub.

Reads every sheet of an onboarding workbook into a mapping of
sheet name -> ordered list of row dictionaries (header -> raw cell value),
using pandas with the openpyxl engine. Cell values are converted to native
Python types; empty cells become None and fully empty rows are dropped.
"""

import logging
import re
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

logger = logging.getLogger(__name__)

SheetRows = List[Dict[str, Any]]


class ExcelReadError(Exception):
    """Raised when Excel file reading fails."""

    pass


class ExcelReader:
    """
    Robust Excel workbook reader with comprehensive error handling.

    Wraps pandas Excel reading with validation, header cleanup and
    cell value normalization so downstream stages only ever see plain
    Python values.
    """

    def read_workbook(
        self,
        file_path: Union[str, Path],
    ) -> Dict[str, SheetRows]:
        """
        Read every sheet of a workbook.

        Cells are read with dtype=object so a sparse boolean or integer
        column keeps its values instead of being upcast to float.

        Args:
            file_path: Path to the Excel file to read

        Returns:
            Dict of sheet name -> list of row dicts, in workbook sheet order

        Raises:
            ExcelReadError: If file cannot be read or processed
            FileNotFoundError: If file does not exist
        """
        file_path_obj = self._validate_path(file_path)

        try:
            logger.info(f"Reading Excel workbook: {file_path_obj}")
            selected = self.get_sheet_names(file_path_obj)
            frames = (
                pd.read_excel(
                    file_path_obj,
                    sheet_name=selected,
                    engine="openpyxl",
                    header=0,
                    dtype=object,
                )
                if selected
                else {}
            )
        except FileNotFoundError:
            raise
        except ExcelReadError:
            raise
        except zipfile.BadZipFile:
            raise ExcelReadError(
                f"Failed to parse Excel file {file_path_obj}: corrupted or invalid format"
            )
        except Exception as e:
            raise ExcelReadError(
                f"Unexpected error reading Excel file {file_path_obj}: {e}"
            )

        workbook: Dict[str, SheetRows] = {}
        for sheet_name in selected:
            rows = self._dataframe_to_rows(frames[sheet_name])
            logger.info(f"Read {len(rows)} rows from sheet '{sheet_name}'")
            workbook[str(sheet_name)] = rows

        return workbook

    def get_sheet_names(self, file_path: Union[str, Path]) -> List[str]:
        """
        Get list of sheet names from Excel file.

        Raises:
            ExcelReadError: If file cannot be read
            FileNotFoundError: If file does not exist
        """
        file_path_obj = self._validate_path(file_path)

        try:
            with pd.ExcelFile(file_path_obj, engine="openpyxl") as excel_file:
                return [str(name) for name in excel_file.sheet_names]
        except zipfile.BadZipFile:
            raise ExcelReadError(
                f"Failed to parse Excel file {file_path_obj}: corrupted or invalid format"
            )
        except Exception as e:
            raise ExcelReadError(f"Cannot read sheet names from {file_path_obj}: {e}")

    def _validate_path(self, file_path: Union[str, Path]) -> Path:
        file_path_obj = Path(file_path)
        if not file_path_obj.exists():
            raise FileNotFoundError(f"Excel file not found: {file_path}")
        if file_path_obj.stat().st_size == 0:
            raise ExcelReadError(f"Excel file is empty: {file_path}")
        return file_path_obj

    def _dataframe_to_rows(self, df: pd.DataFrame) -> SheetRows:
        """
        Convert pandas DataFrame to list of dictionaries with data cleaning.

        Unnamed columns are dropped, header whitespace is trimmed, NaN becomes
        None, numpy/pandas scalars become native Python values and rows with
        no values at all are skipped.
        """
        keep_columns = []
        cleaned_columns = []
        for col in df.columns:
            col_str = str(col).strip() if col is not None else ""
            col_str = col_str.replace("\n", "").replace("\t", "")
            if not col_str or re.match(r"^Unnamed:\s*\d+", col_str):
                continue
            keep_columns.append(col)
            cleaned_columns.append(col_str)

        df = df[keep_columns].copy()
        df.columns = cleaned_columns

        cleaned_rows: SheetRows = []
        for row in df.to_dict(orient="records"):
            cleaned_row: Dict[str, Any] = {}
            for key, value in row.items():
                cleaned_row[str(key)] = _clean_cell(value)

            if all(v is None for v in cleaned_row.values()):
                continue
            cleaned_rows.append(cleaned_row)

        return cleaned_rows


def _clean_cell(value: Any) -> Any:
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.to_pydatetime()
    if pd.isna(value):
        return None
    if hasattr(value, "item"):
        return value.item()
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    return value

