"""Turn an uploaded CSV or spreadsheet into a :class:`NormalizedContent`.

Both formats describe one page: a header row followed by a single data row.
CSV bodies often carry multi-paragraph cells, so everything after the header
line is treated as one logical record and only unquoted commas split it.
"""

from __future__ import annotations

import io
import re
from typing import Dict, List, Sequence, Union

import pandas as pd
from loguru import logger

from pageflow.errors import FileTooLarge, MissingDataRow, ParseError, UnsupportedFormat
from pageflow.records import NormalizedContent
from pageflow.utils.config_loader import MAX_UPLOAD_BYTES


CSV_EXTENSIONS = ("csv",)
SPREADSHEET_ENGINES = {"xlsx": "openpyxl", "xls": "xlrd"}
SPREADSHEET_EXTENSIONS = tuple(SPREADSHEET_ENGINES)
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS + SPREADSHEET_EXTENSIONS

_PARAGRAPH_BREAK = re.compile(r"\n{2,}")


def file_extension(file_name: str) -> str:
    name = (file_name or "").strip()
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def validate_content_file(
    file_name: str, size: int, max_bytes: int = MAX_UPLOAD_BYTES
) -> str:
    """Cheap checks that run before any bytes are parsed. Returns the extension."""
    extension = file_extension(file_name)
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormat(
            "Unsupported file format. Please upload a CSV or Excel (.xlsx, .xls) file."
        )
    if size > max_bytes:
        raise FileTooLarge(size, max_bytes)
    return extension


def parse_content_file(
    file_name: str,
    data: Union[bytes, str],
    *,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> NormalizedContent:
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    extension = validate_content_file(file_name, len(raw), max_bytes)

    if extension in CSV_EXTENSIONS:
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError("CSV file is not valid UTF-8 text.") from exc
        content = parse_csv_content(text)
    else:
        content = parse_spreadsheet_content(raw, extension)

    logger.debug(
        f"Parsed {file_name}: h1={len(content.h1)} h2={len(content.h2)} "
        f"h3={len(content.h3)} paragraphs={len(content.paragraphs)}"
    )
    return content


# --------------------------
#  CSV
# --------------------------
def split_csv_record(text: str) -> List[str]:
    """Split one logical CSV record into fields.

    Quotes toggle quoted mode, ``""`` inside quotes is a literal quote, and
    newlines are kept as part of the current field.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        if char == '"':
            if in_quotes and i + 1 < length and text[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return fields


def parse_csv_content(text: str) -> NormalizedContent:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    header_line, sep, body = text.partition("\n")

    if not sep or not body.strip():
        raise MissingDataRow("CSV must have a header row and at least one data row.")

    headers = split_csv_record(header_line.strip())
    values = split_csv_record(body)
    return _build_content(headers, values)


# --------------------------
#  Spreadsheets
# --------------------------
def parse_spreadsheet_content(raw: bytes, extension: str = "xlsx") -> NormalizedContent:
    try:
        frame = pd.read_excel(
            io.BytesIO(raw),
            engine=SPREADSHEET_ENGINES[extension],
            sheet_name=0,
            header=None,
            dtype=str,
            keep_default_na=False,
        )
    except Exception as exc:
        raise ParseError(f"Could not read spreadsheet: {exc}") from exc

    rows = frame.values.tolist()
    if len(rows) < 2:
        raise MissingDataRow(
            "Spreadsheet must have a header row and at least one data row."
        )

    # Rows past the first data row are ignored.
    headers = [_cell_text(cell) for cell in rows[0]]
    values = [_cell_text(cell) for cell in rows[1]]
    return _build_content(headers, values)


def _cell_text(cell) -> str:
    if cell is None:
        return ""
    return str(cell).replace("\r\n", "\n").replace("\r", "\n")


# --------------------------
#  Shared normalization
# --------------------------
def _build_content(headers: Sequence[str], values: Sequence[str]) -> NormalizedContent:
    header_index: Dict[str, int] = {}
    for index, header in enumerate(headers):
        key = header.strip().lower()
        if key:
            header_index[key] = index

    def value_of(key: str) -> str:
        index = header_index.get(key)
        if index is None or index >= len(values):
            return ""
        return (values[index] or "").strip()

    return NormalizedContent(
        meta_title=value_of("meta_title"),
        meta_description=value_of("meta_description"),
        h1=split_multi_value(value_of("h1")),
        h2=split_multi_value(value_of("h2")),
        h3=split_multi_value(value_of("h3")),
        paragraphs=split_paragraphs(value_of("paragraphs")),
    )


def split_multi_value(value: str) -> List[str]:
    return [part.strip() for part in value.split(";") if part.strip()]


def split_paragraphs(value: str) -> List[str]:
    return [part.strip() for part in _PARAGRAPH_BREAK.split(value) if part.strip()]
