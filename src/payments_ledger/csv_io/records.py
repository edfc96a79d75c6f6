from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Iterable, Iterator, TextIO

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..engine.account import Statement
from ..engine.transaction import (
    ACCOUNT_ID_MAX,
    AMOUNT_LIMIT,
    AMOUNT_SCALE,
    TX_ID_MAX,
    TransactionRecord,
    TxKind,
)

logger = logging.getLogger(__name__)

INPUT_COLUMNS = ("type", "client", "tx", "amount")
OUTPUT_COLUMNS = ("client", "available", "held", "total", "locked")


class RecordFormatError(ValueError):
    def __init__(self, line: int, reason: str, raw: list[str] | None = None):
        self.line = line
        self.reason = reason
        self.raw = raw or []
        super().__init__(f"line {line}: {reason}")


class InputRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    kind: TxKind = Field(alias="type")
    client: int = Field(ge=0, le=ACCOUNT_ID_MAX)
    tx: int = Field(ge=0, le=TX_ID_MAX)
    amount: Decimal | None = None

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, v: Any) -> Any:
        if isinstance(v, str):
            return TxKind.parse(v)
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def _blank_amount(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("amount")
    @classmethod
    def _fixed_scale(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        if abs(v) >= AMOUNT_LIMIT:
            raise ValueError(f"amount out of range: {v}")
        scaled = v.quantize(AMOUNT_SCALE)
        if scaled != v:
            raise ValueError(f"amount has more than 4 decimal places: {v}")
        return scaled

    def to_record(self) -> TransactionRecord:
        # dispute / resolve / chargeback reference an existing tx, any amount is ignored
        amount = self.amount if self.kind.moves_funds else None
        return TransactionRecord(id=self.tx, kind=self.kind, amount=amount)


@dataclass(frozen=True)
class ParsedRow:
    line: int
    account_id: int
    record: TransactionRecord


def _validation_reason(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts) or "invalid row"


def parse_row(line: int, header: list[str], values: list[str]) -> ParsedRow:
    """
    Validate one CSV row. Short rows are accepted (a trailing amount may be
    omitted); extra trailing fields are ignored.
    """
    data: dict[str, Any] = {}
    for i, name in enumerate(header):
        if i < len(values):
            data[name] = values[i]

    try:
        row = InputRow.model_validate(data)
    except ValidationError as e:
        raise RecordFormatError(line, _validation_reason(e), raw=values) from e

    return ParsedRow(line=line, account_id=row.client, record=row.to_record())


def iter_records(
    stream: Iterable[str],
    on_reject: Callable[[RecordFormatError], None] | None = None,
) -> Iterator[ParsedRow]:
    """
    Lazily read transaction rows in file order.

    Malformed rows never reach the caller as records: they are passed to
    `on_reject` (or logged) and reading continues.
    """
    reader = csv.reader(stream)

    header: list[str] | None = None
    for values in reader:
        values = [v.strip() for v in values]
        if not any(values):
            continue

        if header is None:
            header = [h.lower() for h in values]
            header[0] = header[0].lstrip("\ufeff")
            missing = [c for c in INPUT_COLUMNS[:3] if c not in header]
            if missing:
                raise RecordFormatError(reader.line_num, f"missing columns: {', '.join(missing)}", raw=values)
            continue

        try:
            yield parse_row(reader.line_num, header, values)
        except RecordFormatError as e:
            if on_reject is not None:
                on_reject(e)
            else:
                logger.warning("Skipping malformed row: %s", e)


def format_amount(value: Decimal) -> str:
    return format(value, "f")


def write_statements(rows: Iterable[tuple[int, Statement]], stream: TextIO) -> int:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)

    count = 0
    for account_id, st in rows:
        writer.writerow(
            [
                account_id,
                format_amount(st.available),
                format_amount(st.held),
                format_amount(st.total),
                "true" if st.locked else "false",
            ]
        )
        count += 1
    return count
