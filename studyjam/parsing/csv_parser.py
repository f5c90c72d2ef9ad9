import csv
import io
from typing import Dict, List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

RawCsvRecord = Dict[str, str]


class ParseError(Exception):
    """Raised when a CSV resource cannot be turned into the records a stage needs."""

    def __init__(
        self,
        resource: str,
        message: str,
        expected: Optional[Sequence[str]] = None,
        missing: Optional[Sequence[str]] = None,
        found: Optional[Sequence[str]] = None,
    ):
        self.resource = resource
        self.expected = list(expected or [])
        self.missing = list(missing or [])
        self.found = list(found or [])
        super().__init__(message)


class ParsedCsv(BaseModel):
    """The records of one CSV resource plus any non-fatal row warnings."""

    resource: str
    headers: List[str] = []
    records: List[RawCsvRecord] = []
    warnings: List[str] = Field(default_factory=list)


def parse_csv(text: str, resource: str) -> ParsedCsv:
    """
    Parses CSV text with a header row into records keyed by trimmed header names.

    Fully blank lines are skipped. Rows with too many or too few fields are kept
    (extra fields dropped, missing fields empty) and reported as warnings.

    Args:
        text: The raw CSV text.
        resource: Name of the resource, used in warnings and errors.

    Returns:
        A ParsedCsv with the records in file order.

    Raises:
        ParseError: The text is not parseable as CSV.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    headers: List[str] = []
    records: List[RawCsvRecord] = []
    warnings: List[str] = []

    try:
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            if not headers:
                headers = [cell.strip() for cell in row]
                continue

            if len(row) != len(headers):
                warning = (
                    f"Row {reader.line_num} of {resource} has {len(row)} fields, "
                    f"expected {len(headers)}"
                )
                warnings.append(warning)
            padded = row + [""] * (len(headers) - len(row))
            records.append(dict(zip(headers, padded)))
    except csv.Error as e:
        raise ParseError(
            resource, f"Parsing error in {resource} (line {reader.line_num}): {e}"
        ) from e

    if warnings:
        logger.warning(f"Parsing warnings in {resource}: {len(warnings)} malformed row(s)")
        for warning in warnings:
            logger.debug(warning)
    logger.debug(f"Parsed {resource}, found {len(records)} rows.")
    return ParsedCsv(resource=resource, headers=headers, records=records, warnings=warnings)


def require_headers(parsed: ParsedCsv, required: Sequence[str]) -> None:
    """
    Checks that the first record carries every required header.

    A file without data rows passes; callers get an empty record set. Any
    required header missing from its header row is still logged.

    Raises:
        ParseError: Listing the missing headers and the headers that were found.
    """
    if not parsed.records:
        logger.warning(f"{parsed.resource} appears empty, no rows to check headers against.")
        missing = [header for header in required if header not in parsed.headers]
        if parsed.headers and missing:
            logger.warning(
                f"Header row of {parsed.resource} is missing: {', '.join(missing)}. "
                f"Found: [{', '.join(parsed.headers)}]."
            )
        return

    found = list(parsed.records[0].keys())
    missing = [header for header in required if header not in found]
    if missing:
        message = (
            f"Missing required headers in {parsed.resource}: {', '.join(missing)}. "
            f"Expected: [{', '.join(required)}]. Found: [{', '.join(found)}]."
        )
        logger.error(message)
        raise ParseError(
            parsed.resource, message, expected=required, missing=missing, found=found
        )
