from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, Decimal

from .errors import (
    AccountLocked,
    AlreadyDisputed,
    DisputeAlreadySettled,
    DuplicateTransaction,
    InsufficientFunds,
    InvalidInput,
    NotDisputed,
    TransactionNotFound,
    WithdrawalDisputeUnsupported,
)
from .transaction import AMOUNT_SCALE, TransactionRecord, TxKind, TxStatus

SCALE = AMOUNT_SCALE
ZERO = Decimal("0")


def round_amount(value: Decimal) -> Decimal:
    # banker's rounding: 0.00005 -> 0.0000, 0.00015 -> 0.0002
    return value.quantize(SCALE, rounding=ROUND_HALF_EVEN)


@dataclass(frozen=True)
class Statement:
    total: Decimal
    available: Decimal
    held: Decimal
    locked: bool


@dataclass
class LedgerEntry:
    record: TransactionRecord
    status: TxStatus = TxStatus.ACTIVE

    @property
    def amount(self) -> Decimal:
        # only deposits / withdrawals with an amount are ever stored
        return self.record.amount if self.record.amount is not None else ZERO

    def is_disputed(self) -> bool:
        return self.status is TxStatus.DISPUTED


@dataclass
class AccountLedger:
    """
    One account's balances and the history of its funds-moving transactions.

    `apply` is the only mutator. Every rule checks first and commits after, so a
    rejected record leaves balances and history untouched. The single exception is
    a dispute on a withdrawal, which freezes the account before rejecting.
    """

    total: Decimal = ZERO
    available: Decimal = ZERO
    held: Decimal = ZERO
    locked: bool = False
    history: dict[int, LedgerEntry] = field(default_factory=dict)

    def is_locked(self) -> bool:
        return self.locked

    def entry(self, tx_id: int) -> LedgerEntry | None:
        return self.history.get(tx_id)

    def get_statement(self) -> Statement:
        return Statement(
            total=round_amount(self.total),
            available=round_amount(self.available),
            held=round_amount(self.held),
            locked=self.locked,
        )

    def apply(self, record: TransactionRecord) -> None:
        if self.locked:
            raise AccountLocked()

        if record.kind is TxKind.DEPOSIT:
            self._deposit(record)
        elif record.kind is TxKind.WITHDRAWAL:
            self._withdraw(record)
        elif record.kind is TxKind.DISPUTE:
            self._dispute(record.id)
        elif record.kind is TxKind.RESOLVE:
            self._resolve(record.id)
        elif record.kind is TxKind.CHARGEBACK:
            self._chargeback(record.id)
        else:
            raise InvalidInput(f"unsupported transaction kind: {record.kind!r}")

    def _checked_amount(self, record: TransactionRecord) -> Decimal:
        if record.amount is None:
            raise InvalidInput(f"Transaction ID {record.id} has no amount")
        if record.amount < ZERO:
            raise InvalidInput(f"Transaction ID {record.id} has negative amount {record.amount}")
        if record.id in self.history:
            raise DuplicateTransaction(record.id)
        return record.amount

    def _deposit(self, record: TransactionRecord) -> None:
        amount = self._checked_amount(record)

        self.total += amount
        self.available += amount
        self.history[record.id] = LedgerEntry(record=record)

    def _withdraw(self, record: TransactionRecord) -> None:
        amount = self._checked_amount(record)
        if self.available < amount:
            raise InsufficientFunds()

        self.total -= amount
        self.available -= amount
        self.history[record.id] = LedgerEntry(record=record)

    def _lookup(self, tx_id: int) -> LedgerEntry:
        entry = self.history.get(tx_id)
        if entry is None:
            raise TransactionNotFound(tx_id)
        return entry

    def _dispute(self, tx_id: int) -> None:
        entry = self._lookup(tx_id)

        if entry.is_disputed():
            raise AlreadyDisputed(tx_id)
        if entry.status.is_terminal:
            raise DisputeAlreadySettled(tx_id)

        if entry.record.kind is TxKind.WITHDRAWAL:
            # funds already left the account: freeze it
            self.locked = True
            raise WithdrawalDisputeUnsupported(tx_id)

        amount = entry.amount
        if self.available < amount:
            raise InsufficientFunds()

        self.available -= amount
        self.held += amount
        entry.status = TxStatus.DISPUTED

    def _resolve(self, tx_id: int) -> None:
        entry = self._lookup(tx_id)
        if not entry.is_disputed():
            raise NotDisputed(tx_id)

        amount = entry.amount
        self.held -= amount
        self.available += amount
        entry.status = TxStatus.RESOLVED

    def _chargeback(self, tx_id: int) -> None:
        entry = self._lookup(tx_id)
        if not entry.is_disputed():
            raise NotDisputed(tx_id)

        amount = entry.amount
        self.held -= amount
        self.total -= amount
        self.locked = True
        entry.status = TxStatus.CHARGED_BACK
