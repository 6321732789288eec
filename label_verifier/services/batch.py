"""Batch verification: CSV import, bounded parallel processing and CSV export."""

import csv
import io
import time
import uuid
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..config import get_settings
from ..models import (
    ApplicationData,
    BatchItemResult,
    BatchLabel,
    BatchSummary,
    BeverageType,
    ExtractedLabelData,
    VerificationStatus,
)
from .extraction import infer_beverage_type, parse_extraction_response
from .verification import VerificationService

logger = logging.getLogger(__name__)


@dataclass
class CSVRow:
    """Parsed and validated CSV row."""
    filename: str
    application: ApplicationData
    row_number: int = 0


@dataclass
class CSVValidationError:
    """Error from CSV validation."""
    row_number: int
    field: str
    message: str


class CSVParser:
    """Parse and validate batch CSV files of application data."""

    # Required columns
    REQUIRED_COLUMNS = {"filename", "brand_name"}

    # Optional text columns, copied as-is
    TEXT_COLUMNS = {
        "fanciful_name",
        "class_type",
        "alcohol_content",
        "proof",
        "net_contents",
        "producer_name",
        "producer_address",
        "country_of_origin",
        "vintage_year",
        "appellation",
        "age_statement",
    }

    # Optional typed columns
    TYPED_COLUMNS = {"beverage_type", "contains_sulfites"}

    # All valid columns
    VALID_COLUMNS = REQUIRED_COLUMNS | TEXT_COLUMNS | TYPED_COLUMNS

    TRUE_VALUES = {"true", "yes", "1", "y"}
    FALSE_VALUES = {"false", "no", "0", "n"}

    def parse(self, csv_content: str) -> Tuple[List[CSVRow], List[CSVValidationError]]:
        """
        Parse CSV content and return validated rows.

        Args:
            csv_content: CSV file content as string

        Returns:
            Tuple of (valid_rows, errors)
        """
        rows: List[CSVRow] = []
        errors: List[CSVValidationError] = []

        reader = csv.DictReader(io.StringIO(csv_content))

        if reader.fieldnames is None:
            errors.append(CSVValidationError(
                row_number=0,
                field="header",
                message="CSV file is empty or has no header"
            ))
            return rows, errors

        # Normalize column names (lowercase, strip whitespace)
        fieldnames = [f.lower().strip() for f in reader.fieldnames]

        missing_required = self.REQUIRED_COLUMNS - set(fieldnames)
        if missing_required:
            errors.append(CSVValidationError(
                row_number=0,
                field="header",
                message=f"Missing required columns: {', '.join(sorted(missing_required))}"
            ))
            return rows, errors

        # Warn about unknown columns (but don't fail)
        unknown_columns = set(fieldnames) - self.VALID_COLUMNS
        if unknown_columns:
            logger.warning(f"Unknown CSV columns will be ignored: {unknown_columns}")

        seen_filenames = set()

        for row_num, row in enumerate(reader, start=2):  # 1-indexed + header
            normalized_row = {
                (k or "").lower().strip(): (v or "").strip()
                for k, v in row.items()
                if isinstance(v, str) or v is None
            }
            row_errors: List[CSVValidationError] = []

            filename = normalized_row.get("filename", "")
            if not filename:
                row_errors.append(CSVValidationError(row_num, "filename", "Filename is required"))
            elif filename in seen_filenames:
                row_errors.append(CSVValidationError(row_num, "filename", f"Duplicate filename: {filename}"))

            brand_name = normalized_row.get("brand_name", "")
            if not brand_name:
                row_errors.append(CSVValidationError(row_num, "brand_name", "Brand name is required"))

            values = {column: normalized_row.get(column, "") for column in self.TEXT_COLUMNS}

            beverage_type = self._parse_beverage_type(
                normalized_row.get("beverage_type", ""), values["class_type"], row_num, row_errors
            )
            contains_sulfites = self._parse_bool(
                normalized_row.get("contains_sulfites", ""), row_num, row_errors
            )

            if row_errors:
                errors.extend(row_errors)
                continue

            try:
                application = ApplicationData(
                    brand_name=brand_name,
                    fanciful_name=values["fanciful_name"] or None,
                    class_type=values["class_type"],
                    beverage_type=beverage_type,
                    alcohol_content=values["alcohol_content"],
                    proof=values["proof"] or None,
                    net_contents=values["net_contents"],
                    producer_name=values["producer_name"],
                    producer_address=values["producer_address"],
                    country_of_origin=values["country_of_origin"] or None,
                    vintage_year=values["vintage_year"] or None,
                    appellation=values["appellation"] or None,
                    contains_sulfites=contains_sulfites,
                    age_statement=values["age_statement"] or None,
                )
            except ValidationError as e:
                errors.append(CSVValidationError(row_num, "row", f"Invalid application data: {e.error_count()} error(s)"))
                continue

            seen_filenames.add(filename)
            rows.append(CSVRow(filename=filename, application=application, row_number=row_num))

        logger.info(f"Parsed CSV: {len(rows)} valid rows, {len(errors)} errors")
        return rows, errors

    def _parse_beverage_type(
        self,
        raw: str,
        class_type: str,
        row_num: int,
        row_errors: List[CSVValidationError],
    ) -> BeverageType:
        if not raw:
            return infer_beverage_type(class_type)
        try:
            return BeverageType(raw.lower().replace(" ", "_"))
        except ValueError:
            valid = ", ".join(t.value for t in BeverageType)
            row_errors.append(CSVValidationError(
                row_num, "beverage_type", f"Invalid beverage type '{raw}' (expected one of: {valid})"
            ))
            return BeverageType.DISTILLED_SPIRITS

    def _parse_bool(
        self,
        raw: str,
        row_num: int,
        row_errors: List[CSVValidationError],
    ) -> Optional[bool]:
        if not raw:
            return None
        lowered = raw.lower()
        if lowered in self.TRUE_VALUES:
            return True
        if lowered in self.FALSE_VALUES:
            return False
        row_errors.append(CSVValidationError(row_num, "contains_sulfites", f"Invalid boolean value: '{raw}'"))
        return None

    def validate_filenames_match(
        self,
        rows: List[CSVRow],
        available: List[str],
    ) -> Tuple[List[CSVRow], List[CSVValidationError]]:
        """
        Keep rows that have a matching extraction record.

        Args:
            rows: Parsed CSV rows
            available: Filenames with extraction records

        Returns:
            Tuple of (matched_rows, errors)
        """
        available_set = set(available)
        matched = [row for row in rows if row.filename in available_set]
        errors = [
            CSVValidationError(row.row_number, "filename", f"No extraction record for: {row.filename}")
            for row in rows
            if row.filename not in available_set
        ]

        listed = {row.filename for row in rows}
        for name in available:
            if name not in listed:
                logger.warning(f"Extraction record has no CSV row: {name}")

        return matched, errors


class BatchProcessor:
    """
    Verify many labels over a bounded thread pool.

    Each label is an independent call to the pure verification function.
    Failures (unparseable extraction replies, unexpected errors) become
    failure records so they are counted apart from verdicts.
    """

    def __init__(self, verification_service: Optional[VerificationService] = None):
        self.settings = get_settings()
        self.verification_service = verification_service or VerificationService()

    def process_batch(
        self,
        labels: List[BatchLabel],
        max_workers: Optional[int] = None,
    ) -> Tuple[List[BatchItemResult], BatchSummary]:
        """
        Process a batch of labels.

        Args:
            labels: Labels with application data and extraction data
            max_workers: Max parallel workers (defaults to config)

        Returns:
            Tuple of (per-label results in input order, summary)
        """
        start_time = time.perf_counter()
        if max_workers is None:
            max_workers = self.settings.batch_max_workers
        max_workers = max(1, min(max_workers, len(labels) or 1))

        results: List[BatchItemResult] = []

        if len(labels) <= 1 or max_workers <= 1:
            for label in labels:
                results.append(self._process_single_label(label))
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = {
                    executor.submit(self._process_single_label, label): label.id
                    for label in labels
                }
                for future in as_completed(futures):
                    label_id = futures[future]
                    try:
                        results.append(future.result())
                    except Exception as e:
                        logger.exception(f"Worker error for {label_id}: {e}")
                        results.append(BatchItemResult(id=label_id, success=False, error=f"Worker error: {e}"))

        # Restore input order
        order = {label.id: i for i, label in enumerate(labels)}
        results.sort(key=lambda r: order.get(r.id, len(order)))

        total_ms = (time.perf_counter() - start_time) * 1000
        summary = summarize(results, total_ms)
        logger.info(
            f"Batch of {summary.total} done in {total_ms:.0f}ms: "
            f"{summary.succeeded} succeeded, {summary.failed} failed"
        )
        return results, summary

    def _process_single_label(self, label: BatchLabel) -> BatchItemResult:
        start_time = time.perf_counter()
        try:
            extracted = resolve_extracted_data(label.extracted_data, label.extraction_response)
            elapsed_ms = label.processing_time_ms
            if elapsed_ms is None:
                elapsed_ms = (time.perf_counter() - start_time) * 1000
            result = self.verification_service.verify(label.application_data, extracted, elapsed_ms)
        except ValueError as e:
            logger.warning(f"Label {label.id} failed: {e}")
            return BatchItemResult(id=label.id, success=False, error=str(e))
        except Exception as e:
            logger.exception(f"Error processing {label.id}: {e}")
            return BatchItemResult(id=label.id, success=False, error=f"Processing error: {e}")

        return BatchItemResult(id=label.id, success=True, result=result)


def resolve_extracted_data(
    extracted_data: Optional[ExtractedLabelData],
    extraction_response: Optional[str],
) -> ExtractedLabelData:
    """
    Pick the extraction record from a parsed record or a raw service reply.

    Raises:
        ValueError: if neither or both are supplied, or the reply is unparseable
    """
    if extracted_data is not None and extraction_response is not None:
        raise ValueError("Supply either extracted data or an extraction response, not both")
    if extracted_data is not None:
        return extracted_data
    if extraction_response is not None:
        return parse_extraction_response(extraction_response)
    raise ValueError("No extraction data supplied")


def summarize(results: List[BatchItemResult], processing_time_ms: float) -> BatchSummary:
    """Count successes, failures and verdicts of a batch."""
    statuses = [r.result.status for r in results if r.success and r.result is not None]
    total = len(results)
    return BatchSummary(
        total=total,
        succeeded=len(statuses),
        failed=total - len(statuses),
        approved=statuses.count(VerificationStatus.APPROVED),
        rejected=statuses.count(VerificationStatus.REJECTED),
        needs_review=statuses.count(VerificationStatus.NEEDS_REVIEW),
        processing_time_ms=processing_time_ms,
        avg_time_per_label_ms=processing_time_ms / total if total else 0.0,
    )


EXPORT_HEADER = ["Filename", "Status", "Confidence", "Matched Fields", "Gov Warning Valid", "Issues"]


def export_results_csv(results: List[BatchItemResult]) -> str:
    """
    Render batch results as CSV.

    Failed items are exported with status "error" and the error message
    in the Issues column.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)

    for item in results:
        if item.success and item.result is not None:
            r = item.result
            writer.writerow([
                item.id,
                r.status.value,
                f"{r.overall_confidence:.0%}",
                f"{r.matched_fields}/{r.total_fields}",
                "Yes" if r.government_warning_correct else "No",
                "; ".join(r.flagged_issues),
            ])
        else:
            writer.writerow([item.id, "error", "", "", "", item.error or ""])

    return buffer.getvalue()


def build_labels_from_csv(
    rows: List[CSVRow],
    extractions: Dict[str, str],
) -> List[BatchLabel]:
    """Pair CSV application rows with raw extraction replies by filename."""
    return [
        BatchLabel(
            id=row.filename,
            application_data=row.application,
            extraction_response=extractions[row.filename],
        )
        for row in rows
        if row.filename in extractions
    ]
