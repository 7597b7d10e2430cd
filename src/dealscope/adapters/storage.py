from pathlib import Path

import pandas as pd

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


def read_table(path: str | Path) -> pd.DataFrame:
    """First sheet of a workbook, or a CSV. Cells are kept as objects."""
    p = Path(path)
    if p.suffix.lower() in EXCEL_SUFFIXES:
        return pd.read_excel(p, sheet_name=0, dtype=object, engine="openpyxl")
    return pd.read_csv(p, dtype=object, keep_default_na=False)


def write_table(df: pd.DataFrame, path: str | Path, *, sheet_name: str = "Sheet1") -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if p.suffix.lower() in EXCEL_SUFFIXES:
        df.to_excel(p, sheet_name=sheet_name, index=False, engine="openpyxl")
    else:
        df.to_csv(p, index=False)
    return p
