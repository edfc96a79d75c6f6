import io
from decimal import Decimal

import pytest

from payments_ledger.csv_io.records import (
    InputRow,
    RecordFormatError,
    iter_records,
    parse_row,
    write_statements,
)
from payments_ledger.engine.account import Statement
from payments_ledger.engine.transaction import TxKind


def _read(text: str):
    rejects: list[RecordFormatError] = []
    rows = list(iter_records(io.StringIO(text), on_reject=rejects.append))
    return rows, rejects


def test_reads_rows_in_order_with_whitespace_trimmed():
    text = (
        "type, client, tx, amount\n"
        "deposit, 1, 1, 1.0\n"
        "withdrawal,  2, 5,   2.5001 \n"
        "dispute, 1, 1,\n"
        "resolve, 1, 1\n"
    )
    rows, rejects = _read(text)
    assert rejects == []
    assert [r.line for r in rows] == [2, 3, 4, 5]
    assert [r.account_id for r in rows] == [1, 2, 1, 1]

    assert rows[0].record.kind is TxKind.DEPOSIT
    assert rows[0].record.amount == Decimal("1.0")
    assert rows[1].record.amount == Decimal("2.5001")
    assert rows[2].record.amount is None
    assert rows[3].record.kind is TxKind.RESOLVE


def test_amount_on_dispute_is_ignored():
    rows, _ = _read("type,client,tx,amount\ndispute,1,4,9.99\n")
    assert rows[0].record.amount is None


def test_deposit_without_amount_reaches_core_as_none():
    rows, rejects = _read("type,client,tx,amount\ndeposit,1,4,\n")
    assert rejects == []
    assert rows[0].record.amount is None


@pytest.mark.parametrize(
    "line",
    [
        "transfer,1,1,1.0",
        "deposit,abc,1,1.0",
        "deposit,70000,1,1.0",
        "deposit,-1,1,1.0",
        "deposit,1,4294967296,1.0",
        "deposit,1,1,ten",
        "deposit,1,1,NaN",
        "deposit,1,1,1e30",
        "deposit,1,1,100000000000000",
        "withdrawal,1,1,-100000000000000",
        "deposit,1,1,1.00001",
        "deposit,1,1,1E-30",
        "deposit,1,1,9999.123456789012345678901234567891",
    ],
)
def test_malformed_rows_are_rejected_and_reading_continues(line):
    rows, rejects = _read(f"type,client,tx,amount\n{line}\ndeposit,2,2,1\n")
    assert len(rejects) == 1
    assert rejects[0].line == 2
    assert [r.account_id for r in rows] == [2]


def test_missing_header_columns_is_fatal():
    with pytest.raises(RecordFormatError):
        _read("kind,client,amount\ndeposit,1,1\n")


def test_blank_lines_skipped():
    rows, rejects = _read("type,client,tx,amount\n\ndeposit,1,1,1\n\n")
    assert len(rows) == 1
    assert rejects == []


def test_unhandled_reject_is_logged(caplog):
    rows = list(iter_records(io.StringIO("type,client,tx,amount\nfoo,1,1,1\n")))
    assert rows == []
    assert "Skipping malformed row" in caplog.text


def test_parse_row_with_reordered_header():
    row = parse_row(7, ["tx", "amount", "client", "type"], ["3", "4.25", "9", "withdrawal"])
    assert row.line == 7
    assert row.account_id == 9
    assert row.record.id == 3
    assert row.record.kind is TxKind.WITHDRAWAL
    assert row.record.amount == Decimal("4.25")


def test_input_row_accepts_field_names():
    row = InputRow.model_validate({"type": "Chargeback", "client": "1", "tx": "2"})
    assert row.kind is TxKind.CHARGEBACK
    assert row.amount is None


def test_write_statements_format():
    out = io.StringIO()
    n = write_statements(
        [
            (1, Statement(Decimal("1.5000"), Decimal("1.5000"), Decimal("0.0000"), False)),
            (2, Statement(Decimal("0.0000"), Decimal("0.0000"), Decimal("0.0000"), True)),
        ],
        out,
    )
    assert n == 2
    assert out.getvalue() == (
        "client,available,held,total,locked\n"
        "1,1.5000,0.0000,1.5000,false\n"
        "2,0.0000,0.0000,0.0000,true\n"
    )


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1.50000", "1.5000"),
        ("2e3", "2000.0000"),
        ("0.0001", "0.0001"),
        ("99999999999999.9999", "99999999999999.9999"),
    ],
)
def test_amount_is_fixed_to_four_places(text, expected):
    rows, rejects = _read(f"type,client,tx,amount\ndeposit,1,1,{text}\n")
    assert rejects == []
    amount = rows[0].record.amount
    assert amount == Decimal(expected)
    assert str(amount) == expected


def test_reject_keeps_raw_row():
    _, rejects = _read("type,client,tx,amount\ndeposit, 1, 1, 1e30\n")
    assert rejects[0].raw == ["deposit", "1", "1", "1e30"]
    assert "out of range" in rejects[0].reason


def test_bom_before_header_is_ignored():
    rows, rejects = _read("\ufefftype,client,tx,amount\ndeposit,1,1,1\n")
    assert rejects == []
    assert rows[0].record.kind is TxKind.DEPOSIT
