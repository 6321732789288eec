"""Services for normalization, parsing, comparison, warning validation, verification and batch processing."""

from .normalization import normalize, similarity, semantically_equal
from .parsing import AlcoholContent, NetContents, parse_alcohol_content, parse_net_contents
from .rules import alcohol_tolerance, is_standard_fill_size
from .comparators import (
    Comparison,
    FieldKind,
    FieldSpec,
    compare_brand_names,
    compare_alcohol_content,
    compare_net_contents,
    compare_strings,
    compare_exact,
    verify_field,
)
from .warning import validate_government_warning, validate_government_warning_enhanced
from .verification import VerificationService, verify_label
from .extraction import ExtractionParseError, clean_value, parse_extraction_response, to_extracted_label_data, infer_beverage_type
from .batch import CSVParser, CSVRow, CSVValidationError, BatchProcessor, export_results_csv, resolve_extracted_data

__all__ = [
    "normalize",
    "similarity",
    "semantically_equal",
    "AlcoholContent",
    "NetContents",
    "parse_alcohol_content",
    "parse_net_contents",
    "alcohol_tolerance",
    "is_standard_fill_size",
    "Comparison",
    "FieldKind",
    "FieldSpec",
    "compare_brand_names",
    "compare_alcohol_content",
    "compare_net_contents",
    "compare_strings",
    "compare_exact",
    "verify_field",
    "validate_government_warning",
    "validate_government_warning_enhanced",
    "VerificationService",
    "verify_label",
    "ExtractionParseError",
    "clean_value",
    "parse_extraction_response",
    "to_extracted_label_data",
    "infer_beverage_type",
    "CSVParser",
    "CSVRow",
    "CSVValidationError",
    "BatchProcessor",
    "export_results_csv",
    "resolve_extracted_data",
]
