import logging

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from definitions import Block, Book, Copy, Loan, Reader
from results import Result, StorageError

logger = logging.getLogger(__name__)

_open_loan = and_(Loan.return_date == None, Loan.is_returned == False)  # noqa: E711,E712


class LibraryStore:
    """Persistent store for the loan workflow, backed by one SQLAlchemy session.

    Lookups never mutate. Changes made to loaded records stay pending in the
    session until ``commit`` applies them together with any new rows, or
    ``rollback`` discards them.
    """

    def __init__(self, session):
        self.session = session

    def find_reader_by_id(self, reader_id):
        return self.session.get(Reader, reader_id)

    def find_copy_by_id(self, copy_id):
        return self.session.get(Copy, copy_id)

    def find_loan_by_id(self, loan_id):
        return self.session.get(Loan, loan_id)

    def list_blocks_for_reader(self, reader_id):
        return (
            self.session.query(Block)
            .filter(Block.reader_id == reader_id)
            .order_by(Block.block_id)
            .all()
        )

    def find_open_loans_for_copy(self, copy_id):
        return (
            self.session.query(Loan)
            .filter(Loan.copy_id == copy_id, _open_loan)
            .order_by(Loan.loan_id)
            .all()
        )

    def find_open_loans_for_reader(self, reader_id):
        return (
            self.session.query(Loan)
            .filter(Loan.reader_id == reader_id, _open_loan)
            .order_by(Loan.loan_id)
            .all()
        )

    def list_open_loans(self):
        return (
            self.session.query(Loan)
            .filter(_open_loan)
            .order_by(Loan.issue_date.desc(), Loan.loan_id.desc())
            .all()
        )

    def list_readers(self):
        return self.session.query(Reader).order_by(Reader.reader_id).all()

    def list_copies(self):
        return self.session.query(Copy).order_by(Copy.copy_id).all()

    def list_eligible_readers(self):
        """Readers without a blocking Block row, ordered by last name."""
        blocked_ids = select(Block.reader_id).where(Block.is_blocked == True)  # noqa: E712
        return (
            self.session.query(Reader)
            .filter(Reader.reader_id.notin_(blocked_ids))
            .order_by(Reader.last_name, Reader.reader_id)
            .all()
        )

    def list_available_copies(self):
        """Available copies paired with their book, ordered by title."""
        return (
            self.session.query(Copy, Book)
            .join(Book, Book.book_id == Copy.book_id)
            .options(joinedload(Book.author))
            .filter(Copy.is_available == True)  # noqa: E712
            .order_by(Book.title, Copy.copy_id)
            .all()
        )

    def commit(self, new_rows=()):
        """Apply pending changes and ``new_rows`` as one transaction.

        On any database failure the whole unit is rolled back, so later reads
        see the state from before the call.
        """
        try:
            self.session.add_all(list(new_rows))
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("commit failed, changes rolled back: %s", exc)
            return Result.failure(StorageError(cause=str(exc)))
        return Result.success()

    def rollback(self):
        self.session.rollback()
