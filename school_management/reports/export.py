from __future__ import annotations

import csv
import io
from typing import Sequence

import pandas as pd
from flask import Response, send_file

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def rows_to_frame(headers: Sequence[str], rows: Sequence[Sequence]) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=list(headers))


def csv_text(frame: pd.DataFrame) -> str:
    """Every cell quoted, one record per line."""
    return frame.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n").rstrip("\n")


def csv_response(frame: pd.DataFrame, filename: str) -> Response:
    return Response(
        csv_text(frame),
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def xlsx_response(frame: pd.DataFrame, filename: str, *, sheet_name: str = "Report"):
    # Written in memory, nothing lands on disk
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name=sheet_name)
    output.seek(0)
    return send_file(output, download_name=filename, as_attachment=True, mimetype=XLSX_MIMETYPE)
