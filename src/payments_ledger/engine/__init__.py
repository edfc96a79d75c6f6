from .account import AccountLedger, LedgerEntry, Statement
from .errors import (
    AccountLocked,
    AccountNotFound,
    AlreadyDisputed,
    DisputeAlreadySettled,
    DuplicateTransaction,
    InsufficientFunds,
    InvalidInput,
    NotDisputed,
    TransactionNotFound,
    TxError,
    WithdrawalDisputeUnsupported,
)
from .registry import AccountRegistry
from .transaction import TransactionRecord, TxKind, TxStatus

__all__ = [
    "AccountLedger",
    "AccountRegistry",
    "LedgerEntry",
    "Statement",
    "TransactionRecord",
    "TxKind",
    "TxStatus",
    "TxError",
    "InvalidInput",
    "InsufficientFunds",
    "DuplicateTransaction",
    "TransactionNotFound",
    "AlreadyDisputed",
    "DisputeAlreadySettled",
    "NotDisputed",
    "AccountLocked",
    "WithdrawalDisputeUnsupported",
    "AccountNotFound",
]
