from __future__ import annotations


class TxError(Exception):
    """
    Base class for business-rule rejections raised by the ledger.

    Every subclass has a stable `code` used in logs and the reject store.
    A rejected record leaves the account as it was (withdrawal disputes excepted,
    see WithdrawalDisputeUnsupported).
    """

    code = "tx_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message())

    def default_message(self) -> str:
        return "transaction rejected"


class InvalidInput(TxError):
    code = "invalid_input"

    def default_message(self) -> str:
        return "Invalid input"


class InsufficientFunds(TxError):
    code = "insufficient_funds"

    def default_message(self) -> str:
        return "Insufficient funds in account"


class _TxRefError(TxError):
    def __init__(self, tx_id: int):
        self.tx_id = tx_id
        super().__init__()


class DuplicateTransaction(_TxRefError):
    code = "duplicate_transaction"

    def default_message(self) -> str:
        return f"Transaction ID {self.tx_id} already exists"


class TransactionNotFound(_TxRefError):
    code = "transaction_not_found"

    def default_message(self) -> str:
        return f"Transaction ID {self.tx_id} doesn't exist"


class AlreadyDisputed(_TxRefError):
    code = "already_disputed"

    def default_message(self) -> str:
        return f"Transaction ID {self.tx_id} already disputed"


class DisputeAlreadySettled(AlreadyDisputed):
    # resolved / charged back transactions cannot enter a new dispute
    code = "dispute_already_settled"

    def default_message(self) -> str:
        return f"Transaction ID {self.tx_id} dispute already settled"


class NotDisputed(_TxRefError):
    code = "not_disputed"

    def default_message(self) -> str:
        return f"Transaction ID {self.tx_id} not disputed"


class WithdrawalDisputeUnsupported(_TxRefError):
    """
    Raised after the account has been frozen: the disputed withdrawal's funds
    have already left the account.
    """

    code = "withdrawal_dispute_unsupported"

    def default_message(self) -> str:
        return f"Withdrawal transaction {self.tx_id} cannot be disputed, account locked"


class AccountLocked(TxError):
    code = "account_locked"

    def default_message(self) -> str:
        return "Account locked due to chargeback/dispute on withdrawal"


class AccountNotFound(TxError):
    code = "account_not_found"

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")
