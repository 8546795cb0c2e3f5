import logging
from datetime import date, timedelta
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from definitions import Loan
from eligibility import check_eligibility
from results import AlreadyReturned, NotFound, PartialUpdateFailure, Result

logger = logging.getLogger(__name__)


class DurationPolicy(Enum):
    TWO_WEEKS = 14
    ONE_MONTH = 30

    @property
    def days(self):
        return self.value


def due_date_for(issue_date, policy=DurationPolicy.TWO_WEEKS):
    return issue_date + timedelta(days=policy.days)


class LoanWorkflow:
    """Issues and returns loans against an injected ``LibraryStore``.

    Each call is one unit of work: either the loan row and both availability
    flags are committed together, or the store is rolled back to where it was
    before the call.
    """

    def __init__(self, store):
        self.store = store

    def issue_loan(self, reader_id, copy_id, issue_date=None,
                   policy=DurationPolicy.TWO_WEEKS, due_date=None):
        issue_date = issue_date or date.today()
        if due_date is None:
            due_date = due_date_for(issue_date, policy)

        checked = check_eligibility(self.store, reader_id, copy_id)
        if not checked.ok:
            return checked

        reader = self.store.find_reader_by_id(reader_id)
        copy = self.store.find_copy_by_id(copy_id)

        loan = Loan(reader_id=reader_id,
                    copy_id=copy_id,
                    issue_date=issue_date,
                    due_date=due_date,
                    return_date=None,
                    is_returned=False)
        copy.is_available = False
        reader.has_active_loan = True
        reader.must_return_by = due_date

        committed = self.store.commit([loan])
        if not committed.ok:
            return committed

        logger.info("issued loan %s: copy %s to reader %s, due %s",
                    loan.loan_id, copy_id, reader_id, due_date.isoformat())
        return Result.success(loan)

    def return_loan(self, loan_id, return_date=None):
        return_date = return_date or date.today()

        loan = self.store.find_loan_by_id(loan_id)
        if loan is None:
            return self._refuse(NotFound('loan', loan_id))
        if not loan.is_open:
            return self._refuse(AlreadyReturned(loan_id))

        copy = self.store.find_copy_by_id(loan.copy_id)
        if copy is None:
            return self._refuse(NotFound('copy', loan.copy_id))

        loan.return_date = return_date
        loan.is_returned = True
        copy.is_available = True

        try:
            reader = self.store.find_reader_by_id(loan.reader_id)
            if reader is None:
                raise LookupError(f"reader {loan.reader_id} not found")
            reader.has_active_loan = False
            reader.must_return_by = None
        except (LookupError, SQLAlchemyError) as exc:
            self.store.rollback()
            logger.error("return of loan %s rolled back, reader not updated: %s", loan_id, exc)
            return Result.failure(PartialUpdateFailure(loan_id=loan_id, cause=str(exc)))

        committed = self.store.commit()
        if not committed.ok:
            return committed

        logger.info("returned loan %s on %s", loan_id, return_date.isoformat())
        return Result.success(loan)

    def _refuse(self, error):
        logger.warning("return refused: %s", error.message)
        return Result.failure(error)
