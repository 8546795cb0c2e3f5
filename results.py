"""Outcome types shared by the eligibility checker, the loan workflow and the store.

Expected failures (missing records, ineligible readers or copies, double
returns) travel back to the caller inside a ``Result`` instead of being raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class IneligibilityReason(str, Enum):
    READER_BLOCKED = 'reader_blocked'
    READER_ALREADY_HAS_LOAN = 'reader_already_has_loan'
    COPY_UNAVAILABLE = 'copy_unavailable'
    COPY_ALREADY_LOANED = 'copy_already_loaned'


@dataclass(frozen=True)
class LoanError:
    code = 'error'

    @property
    def message(self) -> str:
        return self.code


@dataclass(frozen=True)
class NotFound(LoanError):
    entity: str
    id: Any
    code = 'not_found'

    @property
    def message(self) -> str:
        return f'{self.entity.capitalize()} {self.id} not found'


_INELIGIBLE_MESSAGES = {
    IneligibilityReason.READER_BLOCKED: 'Reader is blocked',
    IneligibilityReason.READER_ALREADY_HAS_LOAN: 'Reader already has a book on loan',
    IneligibilityReason.COPY_UNAVAILABLE: 'Copy is not available for loan',
    IneligibilityReason.COPY_ALREADY_LOANED: 'Copy is already on loan to another reader',
}


@dataclass(frozen=True)
class Ineligible(LoanError):
    reason: IneligibilityReason
    detail: Optional[str] = None
    code = 'ineligible'

    @property
    def message(self) -> str:
        text = _INELIGIBLE_MESSAGES[self.reason]
        if self.detail:
            return f'{text}: {self.detail}'
        return text


@dataclass(frozen=True)
class AlreadyReturned(LoanError):
    loan_id: int
    code = 'already_returned'

    @property
    def message(self) -> str:
        return f'Loan {self.loan_id} has already been returned'


@dataclass(frozen=True)
class StorageError(LoanError):
    cause: str
    code = 'storage_error'

    @property
    def message(self) -> str:
        return f'Storage failure: {self.cause}'


@dataclass(frozen=True)
class PartialUpdateFailure(LoanError):
    loan_id: int
    cause: str
    code = 'partial_update_failure'

    @property
    def message(self) -> str:
        return f'Loan {self.loan_id} could not be returned, reader update failed: {self.cause}'


@dataclass(frozen=True)
class Result:
    value: Any = None
    error: Optional[LoanError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value=None):
        return cls(value=value)

    @classmethod
    def failure(cls, error: LoanError):
        return cls(error=error)
