import pytest

from brandmerge.errors import CsvReadError
from brandmerge.reader import decode_bytes, detect_delimiter, parse_csv_text, read_csv


def test_decode_latin1_export():
    # Include a Latin-1 character to force non-UTF-8 handling
    raw = "brand,slug,hq\nCafé Nutrition,cafe-nutrition,Montréal\n".encode("latin-1")

    text, encoding, lossy = decode_bytes(raw)
    assert "Montréal" in text
    assert "Café" in text
    assert encoding != "utf-8"
    assert lossy is False


def test_decode_utf8_bom():
    text, encoding, lossy = decode_bytes("\ufeffbrand,slug\n".encode("utf-8"))
    assert text == "brand,slug\n"
    assert encoding == "utf-8"
    assert not lossy


def test_detect_delimiter():
    assert detect_delimiter("brand,slug,hq") == ","
    assert detect_delimiter("brand;slug;hq") == ";"
    assert detect_delimiter("brand\tslug") == "\t"
    assert detect_delimiter("brand") == ","


def test_parse_trims_and_skips_blank_lines():
    table = parse_csv_text(" brand , slug \r\n Acme , acme \r\n,\r\n\r\nBeta,beta\r\n", "brands")
    assert table.headers == ["brand", "slug"]
    assert table.rows == [
        {"brand": "Acme", "slug": "acme"},
        {"brand": "Beta", "slug": "beta"},
    ]


def test_parse_keeps_multiline_quoted_cells():
    table = parse_csv_text('brand,slug,testing_qa_notes\nAcme,acme,"Line 1\n\nLine 2"\n', "brands")
    assert table.rows[0]["testing_qa_notes"] == "Line 1\n\nLine 2"


def test_semicolon_export_keeps_commas_in_cells():
    table = parse_csv_text('brand;slug;certification\nAcme;acme;"NSF, GMP"\n', "brands")
    assert table.delimiter == ";"
    assert table.rows[0]["certification"] == "NSF, GMP"


def test_short_row_is_padded_with_warning():
    table = parse_csv_text("brand,slug,hq\nAcme,acme\n", "brands")
    assert table.rows == [{"brand": "Acme", "slug": "acme", "hq": ""}]
    assert len(table.warnings) == 1
    assert table.warnings[0].issue == "row_too_short"
    assert table.warnings[0].action == "padded_to_3"


def test_long_row_is_fatal():
    with pytest.raises(CsvReadError, match="row 2 has 3 columns, expected 2"):
        parse_csv_text("brand,slug\nAcme,acme,extra\n", "brands")


def test_empty_file():
    table = parse_csv_text("", "sources")
    assert table.headers == []
    assert table.rows == []


def test_read_missing_file(tmp_path):
    with pytest.raises(CsvReadError) as info:
        read_csv(tmp_path / "nope.csv", "brands")
    assert str(info.value).startswith("Error reading brands CSV:")


def test_read_csv_from_disk(tmp_path):
    path = tmp_path / "sources.csv"
    path.write_bytes("slug,url\nacme,https://acme.com\n".encode("utf-8"))
    table = read_csv(path, "sources")
    assert table.label == "sources"
    assert table.rows == [{"slug": "acme", "url": "https://acme.com"}]
