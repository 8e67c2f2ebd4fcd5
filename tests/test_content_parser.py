import io

import pandas as pd
import pytest

from pageflow.errors import FileTooLarge, MissingDataRow, ParseError, UnsupportedFormat
from pageflow.parsing import content_parser
from pageflow.parsing.content_parser import (
    parse_content_file,
    parse_csv_content,
    split_csv_record,
)
from pageflow.records import NormalizedContent


HEADERS = ["meta_title", "meta_description", "h1", "h2", "h3", "paragraphs"]


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def content_to_csv(content: NormalizedContent) -> str:
    values = [
        content.meta_title,
        content.meta_description,
        ";".join(content.h1),
        ";".join(content.h2),
        ";".join(content.h3),
        "\n\n".join(content.paragraphs),
    ]
    return ",".join(HEADERS) + "\n" + ",".join(_quote(v) for v in values)


def spreadsheet_bytes(rows) -> bytes:
    buffer = io.BytesIO()
    pd.DataFrame(rows).to_excel(buffer, header=False, index=False)
    return buffer.getvalue()


def test_csv_round_trip_reproduces_record():
    record = NormalizedContent(
        meta_title='Pumps, valves & "fittings"',
        meta_description="Everything about industrial pumps.",
        h1=["Industrial Pumps"],
        h2=["Centrifugal", "Positive displacement"],
        h3=["Seals", "Impellers", "Motors"],
        paragraphs=[
            "Pumps move fluids.\nThey come in many shapes.",
            "Choose by flow rate, head and viscosity.",
        ],
    )

    assert parse_content_file("page.csv", content_to_csv(record).encode("utf-8")) == record


def test_csv_multi_paragraph_cell_keeps_single_newlines():
    csv_text = (
        "meta_title,paragraphs\n"
        '"Title","First line\nstill the first paragraph\n\nSecond paragraph\n\n\n\nThird"'
    )

    content = parse_csv_content(csv_text)

    assert content.paragraphs == [
        "First line\nstill the first paragraph",
        "Second paragraph",
        "Third",
    ]


def test_csv_missing_h3_header_yields_empty_list():
    csv_text = "meta_title,meta_description,h1,h2,paragraphs\nTitle,Desc,One,Two;Three,Body"

    content = parse_content_file("page.csv", csv_text.encode("utf-8"))

    assert content.h3 == []
    assert content.h2 == ["Two", "Three"]
    assert content.paragraphs == ["Body"]


def test_csv_headers_are_case_insensitive_and_trimmed():
    csv_text = " Meta_Title , H1 \nHello, A ; ;B ;"

    content = parse_csv_content(csv_text)

    assert content.meta_title == "Hello"
    assert content.h1 == ["A", "B"]


def test_csv_handles_crlf_and_bom():
    csv_text = "\ufeffmeta_title,h1\r\nTitle,Heading\r\n"

    content = parse_content_file("page.csv", csv_text.encode("utf-8"))

    assert content.meta_title == "Title"
    assert content.h1 == ["Heading"]


def test_split_csv_record_respects_quotes():
    assert split_csv_record('a,"b,c","say ""hi""",') == ["a", "b,c", 'say "hi"', ""]
    assert split_csv_record('"multi\nline",x') == ["multi\nline", "x"]


@pytest.mark.parametrize("csv_text", ["meta_title,h1", "meta_title,h1\n", "meta_title,h1\n   \n"])
def test_csv_without_data_row_fails(csv_text):
    with pytest.raises(MissingDataRow):
        parse_content_file("page.csv", csv_text.encode("utf-8"))


def test_unsupported_extension_fails():
    with pytest.raises(UnsupportedFormat):
        parse_content_file("page.docx", b"meta_title\nx")

    with pytest.raises(UnsupportedFormat):
        parse_content_file("no-extension", b"meta_title\nx")


def test_oversized_file_rejected_before_parsing(monkeypatch):
    def fail(*_args, **_kwargs):
        raise AssertionError("parser must not run for oversized files")

    monkeypatch.setattr(content_parser, "parse_csv_content", fail)
    monkeypatch.setattr(content_parser, "parse_spreadsheet_content", fail)

    big = b"x" * (6 * 1024 * 1024)

    with pytest.raises(FileTooLarge) as excinfo:
        parse_content_file("page.csv", big)
    assert excinfo.value.size == len(big)

    with pytest.raises(FileTooLarge):
        parse_content_file("page.xlsx", big)


def test_custom_size_limit():
    with pytest.raises(FileTooLarge):
        parse_content_file("page.csv", b"meta_title\nabc", max_bytes=5)


def test_invalid_utf8_csv_is_a_parse_error():
    with pytest.raises(ParseError):
        parse_content_file("page.csv", b"meta_title\n\xff\xfe\xfa")


def test_xlsx_uses_first_data_row_only():
    data = spreadsheet_bytes(
        [
            ["Meta_Title", "h1", "h2", "paragraphs"],
            ["Pumps", "Industrial Pumps", "Types; Uses", "One\n\nTwo"],
            ["Ignored", "Ignored", "Ignored", "Ignored"],
        ]
    )

    content = parse_content_file("page.xlsx", data)

    assert content == NormalizedContent(
        meta_title="Pumps",
        h1=["Industrial Pumps"],
        h2=["Types", "Uses"],
        paragraphs=["One", "Two"],
    )


def test_xlsx_and_csv_produce_the_same_record():
    values = ["Title", "Desc", "A;B", "", "C", "P1\n\nP2"]
    csv_text = ",".join(HEADERS) + "\n" + ",".join(_quote(v) for v in values)

    from_csv = parse_content_file("page.csv", csv_text.encode("utf-8"))
    from_xlsx = parse_content_file("page.xlsx", spreadsheet_bytes([HEADERS, values]))

    assert from_csv == from_xlsx


def test_xlsx_with_only_headers_fails():
    with pytest.raises(MissingDataRow):
        parse_content_file("page.xlsx", spreadsheet_bytes([HEADERS]))


def test_corrupt_spreadsheet_is_a_parse_error():
    with pytest.raises(ParseError):
        parse_content_file("page.xlsx", b"definitely not a zip archive")


def test_corrupt_legacy_spreadsheet_is_a_parse_error():
    with pytest.raises(ParseError):
        parse_content_file("page.xls", b"\xd0\xcf\x11\xe0 truncated workbook")
