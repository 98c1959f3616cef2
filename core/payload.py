# core/payload.py
import json
from dataclasses import dataclass
from typing import Any, Final, Iterable, List, Tuple
from pydantic import ValidationError
from model.kv import KeyRecord
from util.enums import ExportFormat
from util.errors import PayloadParseError
from util.types import BulkWriteEntry

LINE_SEP: Final[str] = "\n"


@dataclass
class ParsedPayload:
    format: ExportFormat
    records: List[KeyRecord]


def _to_record(raw: Any, *, line: int | None = None) -> KeyRecord:
    where = f" on line {line}" if line is not None else ""
    if not isinstance(raw, dict):
        raise PayloadParseError(f"expected an object{where}", line)
    try:
        return KeyRecord.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(x) for x in first.get("loc", ()))
        raise PayloadParseError(f"invalid record{where}: {field} {first['msg']}", line)


def _parse_array(body: str) -> List[Any] | None:
    try:
        data = json.loads(body)
    except ValueError:
        return None
    return data if isinstance(data, list) else None


def _parse_lines(body: str) -> List[Tuple[int, Any]]:
    items: List[Tuple[int, Any]] = []
    # Only "\n" separates records; U+2028 and friends may sit unescaped inside strings
    for n, raw in enumerate(body.split(LINE_SEP), start=1):
        line = raw[:-1] if raw.endswith("\r") else raw
        if not line.strip():
            continue
        try:
            items.append((n, json.loads(line)))
        except ValueError:
            # One bad line sinks the whole payload
            raise PayloadParseError(f"line {n} is not valid JSON", n)
    return items


def parse_import_payload(body: str) -> ParsedPayload:
    """
    Two-stage classifier:
      1. the whole body as one JSON array  -> json
      2. otherwise one JSON object per non-empty line -> ndjson
    A body that parses as JSON but is not an array (e.g. a lone object) goes to stage 2.
    """
    array = _parse_array(body)
    if array is not None:
        return ParsedPayload(
            format=ExportFormat.JSON, records=[_to_record(item) for item in array]
        )

    lines = _parse_lines(body)
    records = [_to_record(item, line=n) for n, item in lines]
    return ParsedPayload(format=ExportFormat.NDJSON, records=records)


def to_bulk_entry(record: KeyRecord) -> BulkWriteEntry:
    entry: BulkWriteEntry = {"key": record.name, "value": record.value}
    if record.metadata is not None:
        entry["metadata"] = record.metadata
    if record.expiration_ttl:
        entry["expiration_ttl"] = record.expiration_ttl
    return entry


def _export_obj(record: KeyRecord) -> dict:
    return {"name": record.name, "value": record.value, "metadata": record.metadata or {}}


def serialize_export(records: Iterable[KeyRecord], fmt: ExportFormat) -> str:
    objs = [_export_obj(r) for r in records]
    if fmt is ExportFormat.NDJSON:
        return LINE_SEP.join(
            json.dumps(o, separators=(",", ":"), ensure_ascii=False) for o in objs
        )
    return json.dumps(objs, indent=2, ensure_ascii=False)
