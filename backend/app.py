import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from backend.config import COUNTER_ID, configure_logging
from backend.errors import InvalidCountError, format_exception_response
from backend.store import CounterRecord, get_store

logger = logging.getLogger(__name__)
configure_logging()

SUCCESS_MESSAGE = "Visitor count updated successfully"

SUCCESS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
}
ERROR_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}

FOUND, ABSENT, FAILED = "found", "absent", "failed"


def utc_now_iso():
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ReadOutcome:
    kind: str
    record: Optional[CounterRecord] = None
    error: Optional[Exception] = None

    @classmethod
    def found(cls, record):
        return cls(FOUND, record=record)

    @classmethod
    def absent(cls):
        return cls(ABSENT)

    @classmethod
    def failed(cls, error):
        return cls(FAILED, error=error)


def read_counter(store, counter_id=COUNTER_ID) -> ReadOutcome:
    # Any read fault, not just StoreError, is left to the fallback policy.
    try:
        record = store.get(counter_id)
    except Exception as e:
        return ReadOutcome.failed(e)
    if record is None:
        return ReadOutcome.absent()
    return ReadOutcome.found(record)


def current_count(record: CounterRecord) -> int:
    value = record.count
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
        raise InvalidCountError(f"counter {record.id!r} has a non-numeric count: {value!r}")
    if value < 0 or value != int(value):
        raise InvalidCountError(f"counter {record.id!r} has an invalid count: {value}")
    return int(value)


def base_count(outcome: ReadOutcome, strict_reads=False) -> int:
    """Starting value for the increment.

    Absent and failed reads both count from zero. With ``strict_reads`` a
    failed read raises instead, so a store outage becomes a 500.
    """
    if outcome.kind == FOUND:
        return current_count(outcome.record)
    if outcome.kind == FAILED:
        if strict_reads:
            raise outcome.error
        logger.info("counter read failed, starting from zero: %s", outcome.error)
    else:
        logger.info("counter %s not found, initializing", COUNTER_ID)
    return 0


def increment(store, strict_reads=False) -> int:
    # Unguarded read-then-write: concurrent calls can lose an update.
    new_count = base_count(read_counter(store), strict_reads=strict_reads) + 1
    store.put(CounterRecord(id=COUNTER_ID, count=new_count, last_updated=utc_now_iso()))
    return new_count


def _response(status_code, headers, body=None):
    return {
        "statusCode": status_code,
        "headers": dict(headers),
        "body": json.dumps(body) if body is not None else "",
    }


def success_response(count):
    return _response(200, SUCCESS_HEADERS, {
        "count": count,
        "message": SUCCESS_MESSAGE,
        "timestamp": utc_now_iso(),
    })


def error_response(exc):
    status_code, body = format_exception_response(exc)
    return _response(status_code, ERROR_HEADERS, body)


def _method(event):
    if not isinstance(event, dict):
        return "GET"
    http = (event.get("requestContext") or {}).get("http") or {}
    method = http.get("method") or event.get("httpMethod") or "GET"
    return str(method).upper()


def handle(event, store=None, atomic=False, strict_reads=False):
    """Run one counter invocation and return an API Gateway proxy response.

    ``atomic`` swaps the read-modify-write for a single server-side update;
    it is off by default and for the deployed handler.
    """
    logger.debug("Event: %s", event)
    try:
        if _method(event) == "OPTIONS":
            return _response(204, SUCCESS_HEADERS)

        if store is None:
            store = get_store()
        if atomic:
            new_count = store.increment(COUNTER_ID, utc_now_iso())
        else:
            new_count = increment(store, strict_reads=strict_reads)
        logger.info("counter %s is now %d", COUNTER_ID, new_count)
        return success_response(new_count)
    except Exception as e:
        return error_response(e)


def handler(event, context):
    return handle(event)
