"""
Customer (party) import from Excel / CSV.

Distributors keep their party lists in spreadsheets with all sorts of
headers ("Party Name", "GST No", "Phone Number"). Headers are normalised to
our field names, rows without a name are dropped, and every imported party
gets a lowercase search index.
"""
import io
import re
import logging
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

import pandas as pd

from pharmabill.core.config import settings
from pharmabill.schemas.customer import CustomerCreate, CustomerType
from pharmabill.services.customer_service import build_search_index

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes, BinaryIO]

HEADER_ALIASES = {
    "name": {"partyname", "customername", "name", "party"},
    "gstin": {"gstin", "gstno", "taxid", "gst"},
    "mobile": {"mobile", "phone", "contact", "cell", "phoneno", "phonenumber"},
    "address": {"address", "city", "location", "place"},
    "state_code": {"state", "statecode"},
}

CUSTOMER_FIELDS = tuple(HEADER_ALIASES)

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}


def normalize_header(header) -> str:
    """
    Map a spreadsheet header to a customer field.

    Examples:
        "Party Name" -> "name"
        "Phone No." -> "mobile"
        "Remarks" -> "remarks" (ignored later)
    """
    h = re.sub(r"[^a-z0-9]", "", str(header).lower())
    for field, aliases in HEADER_ALIASES.items():
        if h in aliases:
            return field
    return h


def _read_sheet(source: Source, filename: Optional[str]) -> pd.DataFrame:
    """First sheet as raw strings, header row included as row 0."""
    name = filename or (str(source) if isinstance(source, (str, Path)) else "")
    suffix = Path(name).suffix.lower()

    if isinstance(source, bytes):
        source = io.BytesIO(source)

    if suffix == ".csv":
        return pd.read_csv(source, header=None, dtype=str, keep_default_na=False)
    if suffix in EXCEL_SUFFIXES or not suffix:
        return pd.read_excel(source, sheet_name=0, header=None, dtype=str, keep_default_na=False)
    raise ValueError(f"Unsupported spreadsheet format: {suffix}")


def _cell(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def parse_customer_rows(frame: pd.DataFrame, customer_type: CustomerType) -> Tuple[List[CustomerCreate], int]:
    """Map a raw sheet (header in row 0) to customers. Returns (customers, skipped_rows)."""
    if len(frame.index) < 2:
        return [], 0

    headers = [normalize_header(h) for h in frame.iloc[0].tolist()]
    customers = []
    skipped = 0

    for row in frame.iloc[1:].itertuples(index=False):
        record = {}
        for header, value in zip(headers, row):
            if header in CUSTOMER_FIELDS and header not in record:
                text = _cell(value)
                if text:
                    record[header] = text

        # Name is mandatory
        if not record.get("name"):
            skipped += 1
            continue

        customers.append(CustomerCreate(
            name=record["name"],
            type=customer_type,
            mobile=record.get("mobile", ""),
            gstin=record.get("gstin"),
            state_code=record.get("state_code") or settings.DEFAULT_STATE_CODE,
            address=record.get("address"),
            search_index=build_search_index(record["name"], record.get("gstin"), record.get("mobile")),
        ))

    return customers, skipped


def parse_customer_file(
    source: Source,
    customer_type: CustomerType,
    filename: Optional[str] = None,
) -> Tuple[List[CustomerCreate], int]:
    """
    Read the first sheet of an Excel/CSV file into customers.

    Raises:
        ValueError: unsupported extension or unreadable file
    """
    try:
        frame = _read_sheet(source, filename)
    except ValueError:
        raise
    except Exception as e:
        logger.warning(f"[CustomerImport] Could not read {filename or source!r}: {type(e).__name__}: {e}")
        raise ValueError("Could not read spreadsheet") from e

    customers, skipped = parse_customer_rows(frame, customer_type)
    logger.info(f"[CustomerImport] Parsed {len(customers)} {customer_type.value} customers, skipped {skipped}")
    return customers, skipped
