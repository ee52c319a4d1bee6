from typing import List, Dict
import pandas as pd

from shared.core.schemas import ExportResponse


def export_rows(
    data: List[Dict],
    filename: str = "export.csv",
    column_map: Dict[str, str] | None = None,
) -> ExportResponse:
    """
    Project a list of dictionaries onto friendly column names.

    Args:
        data: List of dictionaries (each dict = row)
        filename: Name of the exported file
        column_map: Mapping of data keys -> friendly column names
    """
    if not data:
        return ExportResponse(filename=filename, data=[])

    # Fill missing keys to avoid KeyError
    if column_map:
        for key in column_map.keys():
            for row in data:
                if key not in row:
                    row[key] = None

    df = pd.DataFrame(data)

    if column_map:
        df = df.rename(columns=column_map)
        # Keep only columns that exist in df (safe)
        existing_columns = [
            col for col in column_map.values() if col in df.columns]
        df = df[existing_columns]

    df = df.astype(object).where(pd.notna(df), None)
    return ExportResponse(filename=filename, data=df.to_dict(orient="records"))


def to_csv(export: ExportResponse, columns: List[str] | None = None) -> str:
    df = pd.DataFrame(export.data, columns=columns)
    return df.to_csv(index=False)
