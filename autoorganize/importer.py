import io
import logging
import zipfile
from dataclasses import dataclass, field
from typing import List, Tuple

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from .errors import ConstraintViolationError, ValidationError

logger = logging.getLogger(__name__)

# Expected columns, after a header row:
# customer_id | make | model | year | vin | engine_type
COLUMNS = ("customer_id", "make", "model", "year", "vin", "engine_type")


@dataclass
class ImportReport:
    imported: List[str] = field(default_factory=list)
    skipped: List[Tuple[int, str]] = field(default_factory=list)  # (row number, reason)


def _cell(row: tuple, index: int):
    value = row[index] if len(row) > index else None
    if isinstance(value, str):
        value = value.strip() or None
    return value


def import_vehicles(store, workbook_bytes: bytes) -> ImportReport:
    """
    Adds one vehicle per row of the first sheet of an .xlsx workbook.

    Each row goes through store.add_vehicle on its own, so a bad row is
    skipped (and reported) without touching the rows already imported.
    """
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(workbook_bytes), read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException) as e:
        raise ValidationError(f"Not a readable .xlsx workbook: {e}") from e

    try:
        report = _import_rows(store, workbook.active)
    finally:
        workbook.close()

    logger.info("Vehicle import: %d imported, %d skipped", len(report.imported), len(report.skipped))
    return report


def _import_rows(store, sheet) -> ImportReport:
    report = ImportReport()

    valid_customer_ids = {customer.id for customer in store.list_customers()}

    for row_number, row in enumerate(sheet.iter_rows(min_row=2, values_only=True), start=2):
        if not row or _cell(row, 0) is None:
            continue

        customer_id = str(_cell(row, 0))
        if customer_id not in valid_customer_ids:
            report.skipped.append((row_number, f"unknown customer {customer_id}"))
            continue

        year = _cell(row, 3)
        if year is not None:
            try:
                year = int(year)
            except (ValueError, TypeError):
                report.skipped.append((row_number, f"invalid year {year!r}"))
                continue

        vehicle = {
            "customer_id": customer_id,
            "make": _cell(row, 1),
            "model": _cell(row, 2),
            "year": year,
            "vin": str(_cell(row, 4)) if _cell(row, 4) is not None else None,
            "engine_type": _cell(row, 5),
        }
        try:
            report.imported.append(store.add_vehicle(vehicle))
        except (ValidationError, ConstraintViolationError) as e:
            report.skipped.append((row_number, str(e)))

    return report
