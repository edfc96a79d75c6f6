from __future__ import annotations

import threading
from typing import Iterator

from .account import AccountLedger, Statement
from .errors import AccountNotFound
from .transaction import TransactionRecord


class AccountRegistry:
    """
    Owns every AccountLedger, keyed by account id.

    Ledgers are created on first reference. Ledger errors propagate to the caller
    unchanged; a failed record is simply not reflected in state.

    Only ledger creation is guarded by a lock. Mutating a given ledger from more
    than one thread at a time is the caller's responsibility to prevent
    (see ShardedApplier).
    """

    def __init__(self) -> None:
        self._ledgers: dict[int, AccountLedger] = {}
        self._create_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._ledgers)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._ledgers

    def ledger(self, account_id: int) -> AccountLedger:
        ledger = self._ledgers.get(account_id)
        if ledger is not None:
            return ledger
        with self._create_lock:
            ledger = self._ledgers.get(account_id)
            if ledger is None:
                ledger = AccountLedger()
                self._ledgers[account_id] = ledger
            return ledger

    def apply(self, account_id: int, record: TransactionRecord) -> None:
        self.ledger(account_id).apply(record)

    def list_accounts(self) -> set[int]:
        return set(self._ledgers)

    def statement_for(self, account_id: int) -> Statement:
        ledger = self._ledgers.get(account_id)
        if ledger is None:
            raise AccountNotFound(account_id)
        return ledger.get_statement()

    def statements(self) -> Iterator[tuple[int, Statement]]:
        for account_id in sorted(self._ledgers):
            yield account_id, self._ledgers[account_id].get_statement()
