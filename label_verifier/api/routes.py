"""API route definitions."""

import json
import time
import uuid
import logging

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from ..models import (
    BatchVerificationResponse,
    BatchVerifyRequest,
    ErrorResponse,
    HealthResponse,
    VerificationResponse,
    VerifyRequest,
)
from ..services import (
    BatchProcessor,
    CSVParser,
    VerificationService,
    export_results_csv,
    resolve_extracted_data,
)
from ..services.batch import build_labels_from_csv
from ..config import get_settings
from .. import __version__

logger = logging.getLogger(__name__)
router = APIRouter()

# Initialize services
verification_service = VerificationService()
batch_processor = BatchProcessor(verification_service)
csv_parser = CSVParser()


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health."""
    return HealthResponse(status="healthy", version=__version__)


@router.post(
    "/verify",
    response_model=VerificationResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid input"}},
    tags=["Verification"],
)
async def verify_label(request: VerifyRequest):
    """
    Verify a single label against its application data.

    Supply either the parsed extraction record (`extractedData`) or the raw
    reply of the image-understanding service (`extractionResponse`).
    """
    start_time = time.perf_counter()

    if (request.extracted_data is None) == (request.extraction_response is None):
        raise HTTPException(
            status_code=400,
            detail="Provide exactly one of extractedData or extractionResponse",
        )

    try:
        extracted = resolve_extracted_data(request.extracted_data, request.extraction_response)
    except ValueError as e:
        logger.warning(f"Extraction record rejected: {e}")
        return VerificationResponse(success=False, error=str(e))

    processing_time_ms = request.processing_time_ms
    if processing_time_ms is None:
        processing_time_ms = (time.perf_counter() - start_time) * 1000

    result = verification_service.verify(request.application_data, extracted, processing_time_ms)
    return VerificationResponse(success=True, result=result)


def _batch_response(labels, output_format: str):
    settings = get_settings()

    if not labels:
        raise HTTPException(status_code=400, detail="No labels provided")
    if len(labels) > settings.max_batch_size:
        raise HTTPException(
            status_code=400,
            detail=f"Batch size exceeds maximum of {settings.max_batch_size}. Please split into smaller batches.",
        )

    job_id = str(uuid.uuid4())
    logger.info(f"Starting batch verification job {job_id} with {len(labels)} labels")
    results, summary = batch_processor.process_batch(labels)

    if output_format == "csv":
        return Response(
            content=export_results_csv(results),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="label-verification-{job_id}.csv"'},
        )

    return BatchVerificationResponse(
        success=summary.succeeded > 0,
        job_id=job_id,
        summary=summary,
        results=results,
    )


@router.post(
    "/verify/batch",
    response_model=BatchVerificationResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid input"}},
    tags=["Verification"],
)
async def verify_batch(
    request: BatchVerifyRequest,
    output_format: str = Query("json", alias="format", pattern="^(json|csv)$"),
):
    """
    Verify a batch of labels.

    Each label is verified independently; a label whose extraction data is
    missing or unparseable becomes a failed item rather than failing the
    batch. Use `?format=csv` for a CSV export.
    """
    return _batch_response(request.labels, output_format)


@router.post(
    "/verify/batch/csv",
    response_model=BatchVerificationResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid input"}},
    tags=["Verification"],
)
async def verify_batch_csv(
    csv_file: UploadFile = File(..., description="CSV file with application data"),
    extractions_file: UploadFile = File(..., description="JSON object mapping filename to extraction reply"),
    output_format: str = Query("json", alias="format", pattern="^(json|csv)$"),
):
    """
    Verify a batch described by a CSV of application rows.

    CSV format:
    - Required columns: filename, brand_name
    - Optional columns: class_type, beverage_type, alcohol_content, proof,
      net_contents, producer_name, producer_address, country_of_origin,
      vintage_year, appellation, contains_sulfites, age_statement,
      fanciful_name

    The extractions file maps each filename to the image-understanding
    service's reply for that label (a JSON object or its raw text).
    """
    try:
        csv_content = (await csv_file.read()).decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded")

    try:
        extractions = json.loads(await extractions_file.read())
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise HTTPException(status_code=400, detail="Extractions file must be a UTF-8 JSON object")
    if not isinstance(extractions, dict):
        raise HTTPException(status_code=400, detail="Extractions file must be a JSON object keyed by filename")

    replies = {
        name: reply if isinstance(reply, str) else json.dumps(reply)
        for name, reply in extractions.items()
    }

    csv_rows, csv_errors = csv_parser.parse(csv_content)
    matched_rows, match_errors = csv_parser.validate_filenames_match(csv_rows, list(replies))
    all_errors = csv_errors + match_errors

    if not matched_rows:
        error_messages = [f"Row {e.row_number}: {e.field} - {e.message}" for e in all_errors[:5]]
        raise HTTPException(
            status_code=400,
            detail=f"No valid CSV rows with extraction records: {'; '.join(error_messages)}",
        )

    if all_errors:
        logger.warning(f"Skipping {len(all_errors)} CSV problem(s) in batch")

    return _batch_response(build_labels_from_csv(matched_rows, replies), output_format)
