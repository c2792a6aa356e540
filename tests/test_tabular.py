"""
Tests del parser CSV de las cargas masivas
"""
import pytest

from app.core.exceptions import TabularParseError
from app.services.bulk.tabular import decode_upload, parse_rows, serialize_rows


def test_parse_rows_uses_header_as_keys():
    rows = parse_rows("id,price\n1,10.50\n2,3\n")

    assert rows == [
        {"id": "1", "price": "10.50"},
        {"id": "2", "price": "3"},
    ]


def test_parse_rows_strips_header_names():
    rows = parse_rows(" id , categoryId \n7,3\n")

    assert rows == [{"id": "7", "categoryId": "3"}]


def test_parse_rows_skips_blank_lines():
    rows = parse_rows("id,price\n1,10\n\n,\n2,20\n")

    assert [r["id"] for r in rows] == ["1", "2"]


def test_parse_rows_fills_missing_cells_with_empty_string():
    rows = parse_rows("id,status\n1\n")

    assert rows == [{"id": "1", "status": ""}]


def test_parse_rows_rejects_extra_cells():
    with pytest.raises(TabularParseError) as exc:
        parse_rows("id,price\n1,10\n2,20,oops\n")

    assert "Line 3" in str(exc.value)


def test_parse_rows_keeps_quoted_json():
    rows = parse_rows('productId,price,options\n1,5,"{""color"": ""red""}"\n')

    assert rows[0]["options"] == '{"color": "red"}'


def test_parse_rows_empty_input():
    assert parse_rows("") == []
    assert parse_rows("id,price\n") == []


def test_decode_upload_drops_bom():
    assert decode_upload(b"\xef\xbb\xbfid,price\n") == "id,price\n"


def test_decode_upload_rejects_invalid_utf8():
    with pytest.raises(TabularParseError):
        decode_upload(b"id,name\n1,\xff\xfe\n")


def test_serialize_rows_writes_header_and_ignores_unknown_keys():
    text = serialize_rows(["id", "name"], [{"id": 1, "name": "Boot", "extra": "x"}])

    assert text.splitlines() == ["id,name", "1,Boot"]
