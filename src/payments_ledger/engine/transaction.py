from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

TX_ID_MAX = 4_294_967_295
ACCOUNT_ID_MAX = 65_535

# fixed 4 dp scale; the magnitude bound keeps any u32-long stream of sums
# within the 28 digit decimal context
AMOUNT_SCALE = Decimal("0.0001")
AMOUNT_LIMIT = Decimal("100000000000000")


class TxKind(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @classmethod
    def parse(cls, text: str) -> "TxKind":
        """
        Map an input type string to a kind. Unknown strings raise ValueError,
        so a record with an unrecognized kind is never constructed.
        """
        norm = (text or "").strip().lower()
        for kind in cls:
            if kind.value == norm:
                return kind
        raise ValueError(f"unknown transaction type: {text!r}")

    @property
    def moves_funds(self) -> bool:
        return self in (TxKind.DEPOSIT, TxKind.WITHDRAWAL)


class TxStatus(str, Enum):
    ACTIVE = "active"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"

    @property
    def is_terminal(self) -> bool:
        return self in (TxStatus.RESOLVED, TxStatus.CHARGED_BACK)


@dataclass(frozen=True)
class TransactionRecord:
    id: int
    kind: TxKind
    amount: Decimal | None = None

    def is_disputed(self) -> bool:
        return self.kind is TxKind.DISPUTE
