"""
Analysis Endpoint

Accepts the catalog and purchase-log files and returns every analysis
table plus the insight summary in one response.
"""

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
import structlog

from sqinch.analysis import run_analysis

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _read_text(upload: UploadFile) -> str:
    raw = await upload.read()
    return raw.decode("utf-8")


@router.post("")
async def analyze_files(
    request: Request,
    products: UploadFile = File(..., description="Catalog CSV, one row per product"),
    customers: UploadFile = File(..., description="Purchase-log CSV, one row per purchase"),
) -> JSONResponse:
    """
    Run the full space efficiency analysis.

    Returns 200 with all tables on success, or 422 with a single error
    message when the files cannot produce a complete result.
    """
    try:
        product_text = await _read_text(products)
        customer_text = await _read_text(customers)
    except UnicodeDecodeError:
        return JSONResponse(
            status_code=422,
            content={"success": False, "error": "Files must be UTF-8 encoded text"},
        )

    logger.info(
        "Analysis requested",
        products_file=products.filename,
        customers_file=customers.filename,
    )

    result = await run_in_threadpool(
        run_analysis, product_text, customer_text, request.app.state.settings
    )

    return JSONResponse(
        status_code=200 if result.success else 422,
        content=result.to_dict(),
    )
