"""
Export Endpoint

Turns one analysis table (as returned by the analysis endpoint) into a
CSV download.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, Field
from polars.exceptions import PolarsError

from sqinch.schema import AnalysisView
from sqinch.serving.export import export_filename, export_table, rows_to_table

router = APIRouter()


class ExportRequest(BaseModel):
    """Rows of one analysis table"""
    rows: List[Dict[str, Any]] = Field(default_factory=list)


@router.post("/{view}")
async def export_view(view: AnalysisView, body: ExportRequest) -> Response:
    """Download a result view as CSV"""
    try:
        table = rows_to_table(body.rows, view)
    except (PolarsError, TypeError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Rows do not match the {view.value} table: {e}")

    return Response(
        content=export_table(table, view),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(view)}"'},
    )
