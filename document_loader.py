"""
Turn a file on disk into a RawDocument.

Workbooks become an ordered mapping of sheet name -> rows of cell values
(empty cells are None, trailing empties trimmed). PDFs become one block of
extracted text. Nothing here interprets the content.
"""
from __future__ import annotations

from collections import OrderedDict
from pathlib import Path
from typing import Any, List, Union

import pandas as pd
import pdfplumber

from report_models import ErrorKind, ImportFailure, RawDocument

# suffix -> pandas reader engine
EXCEL_ENGINES = {".xlsx": "openpyxl", ".xlsm": "openpyxl", ".xls": "xlrd"}
PDF_SUFFIXES = {".pdf"}
TEXT_SUFFIXES = {".txt"}


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, str) and not value.strip():
        return None
    if hasattr(value, "item") and not isinstance(value, str):
        # numpy scalar -> python scalar
        return value.item()
    return value


def frame_to_rows(df: pd.DataFrame) -> List[list]:
    rows = []
    for raw in df.itertuples(index=False, name=None):
        row = [_clean_cell(v) for v in raw]
        while row and row[-1] is None:
            row.pop()
        rows.append(row)
    return rows


def read_workbook(path: Path) -> RawDocument:
    try:
        xls = pd.ExcelFile(path, engine=EXCEL_ENGINES[path.suffix.lower()])
        sheets = OrderedDict()
        for name in xls.sheet_names:
            df = pd.read_excel(xls, sheet_name=name, header=None, dtype=object)
            sheets[name] = frame_to_rows(df)
    except Exception as e:
        print(f"[WARN] Could not read workbook {path.name}: {e}")
        raise ImportFailure(ErrorKind.EXTRACTION_FAILURE, f"Failed to read Excel file {path.name}.") from e
    return RawDocument.from_sheets(sheets, source_name=path.name)


def extract_pdf_text(path: Path) -> str:
    text = ""
    with pdfplumber.open(path) as pdf:
        for page in pdf.pages:
            text += (page.extract_text() or "") + "\n"
    return text


def read_pdf(path: Path) -> RawDocument:
    try:
        text = extract_pdf_text(path)
    except Exception as e:
        print(f"[WARN] ED279 PDF extraction failed for {path.name}: {e}")
        raise ImportFailure(ErrorKind.EXTRACTION_FAILURE, "Failed to parse ED279 PDF.") from e
    return RawDocument.from_text(text, source_name=path.name)


def load_document(path: Union[str, Path]) -> RawDocument:
    """
    Load an uploaded export.

    Args:
        path: .xlsx/.xlsm/.xls workbook, .pdf state report, or .txt with already-extracted text

    Returns:
        RawDocument

    Raises:
        ImportFailure: missing file, unsupported extension, or a decoding fault
    """
    path = Path(path)
    if not path.exists():
        raise ImportFailure(ErrorKind.INPUT_MISSING, f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix in EXCEL_ENGINES:
        return read_workbook(path)
    if suffix in PDF_SUFFIXES:
        return read_pdf(path)
    if suffix in TEXT_SUFFIXES:
        return RawDocument.from_text(path.read_text(encoding="utf-8", errors="replace"), source_name=path.name)
    raise ImportFailure(
        ErrorKind.UNSUPPORTED_FORMAT,
        "Unsupported file type. Please upload an Excel (.xlsx, .xls) or PDF file.",
    )


def list_sheets(path: Union[str, Path]) -> List[str]:
    """Sheet names of a workbook, for a quick look before importing."""
    path = Path(path)
    xls = pd.ExcelFile(path, engine=EXCEL_ENGINES.get(path.suffix.lower(), "openpyxl"))
    return list(xls.sheet_names)
