import json

import pytest

from core.payload import parse_import_payload, serialize_export, to_bulk_entry
from model.kv import KeyRecord
from util.enums import ExportFormat
from util.errors import PayloadParseError


def test_json_array_is_detected():
    body = json.dumps([{"name": "a", "value": "1"}, {"name": "b", "value": "2"}])
    parsed = parse_import_payload(body)

    assert parsed.format is ExportFormat.JSON
    assert [r.name for r in parsed.records] == ["a", "b"]


def test_ndjson_is_the_fallback():
    body = '{"name":"k1","value":"v1"}\n{"name":"k2","value":"v2"}'
    parsed = parse_import_payload(body)

    assert parsed.format is ExportFormat.NDJSON
    assert [(r.name, r.value) for r in parsed.records] == [("k1", "v1"), ("k2", "v2")]


def test_ndjson_skips_blank_lines_and_crlf():
    body = '\r\n{"name":"k1","value":"v1"}\r\n\r\n  \n{"name":"k2","value":"v2"}\n'
    parsed = parse_import_payload(body)

    assert [r.name for r in parsed.records] == ["k1", "k2"]


def test_single_object_body_is_read_as_one_line_of_ndjson():
    parsed = parse_import_payload('{"name":"solo","value":"x"}')

    assert parsed.format is ExportFormat.NDJSON
    assert len(parsed.records) == 1


def test_one_bad_line_fails_the_whole_payload():
    body = '{"name":"k1","value":"v1"}\n{not json}\n{"name":"k3","value":"v3"}'
    with pytest.raises(PayloadParseError) as exc:
        parse_import_payload(body)
    assert exc.value.line == 2


def test_record_without_name_is_rejected():
    with pytest.raises(PayloadParseError):
        parse_import_payload('[{"value": "orphan"}]')


def test_non_object_array_item_is_rejected():
    with pytest.raises(PayloadParseError):
        parse_import_payload('["just a string"]')


def test_empty_body_parses_to_no_records():
    parsed = parse_import_payload("")
    assert parsed.records == []


def test_structured_value_is_kept_as_json_text():
    parsed = parse_import_payload('[{"name": "cfg", "value": {"a": 1}}]')
    assert parsed.records[0].value == '{"a":1}'


def test_bulk_entry_only_carries_optional_fields_when_present():
    plain = to_bulk_entry(KeyRecord(name="a", value="1"))
    full = to_bulk_entry(
        KeyRecord(name="b", value="2", metadata={"m": 1}, expiration_ttl=120)
    )

    assert plain == {"key": "a", "value": "1"}
    assert full == {"key": "b", "value": "2", "metadata": {"m": 1}, "expiration_ttl": 120}


def test_ndjson_export_is_one_standalone_object_per_line():
    records = [KeyRecord(name="k1", value="v1"), KeyRecord(name="k2", value="v2")]
    body = serialize_export(records, ExportFormat.NDJSON)

    assert body.split("\n") == [
        '{"name":"k1","value":"v1","metadata":{}}',
        '{"name":"k2","value":"v2","metadata":{}}',
    ]


def test_json_export_is_a_pretty_printed_array():
    body = serialize_export([KeyRecord(name="k1", value="v1")], ExportFormat.JSON)

    assert body.startswith("[\n")
    assert json.loads(body) == [{"name": "k1", "value": "v1", "metadata": {}}]


def test_line_separator_inside_a_value_does_not_split_the_record():
    body = '{"name":"k1","value":"a\u2028b\u0085c"}\n{"name":"k2","value":"v2"}'
    parsed = parse_import_payload(body)

    assert parsed.format is ExportFormat.NDJSON
    assert [(r.name, r.value) for r in parsed.records] == [
        ("k1", "a\u2028b\u0085c"),
        ("k2", "v2"),
    ]


def test_empty_metadata_is_still_sent():
    entry = to_bulk_entry(KeyRecord(name="a", value="1", metadata={}))
    assert entry == {"key": "a", "value": "1", "metadata": {}}


@pytest.mark.parametrize("fmt", [ExportFormat.JSON, ExportFormat.NDJSON])
def test_export_keeps_non_ascii_text_unescaped(fmt):
    body = serialize_export([KeyRecord(name="grüße", value="日本")], fmt)

    assert "grüße" in body and "日本" in body
    assert "\\u" not in body
