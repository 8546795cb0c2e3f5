from datetime import date
from enum import Enum

from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, Date
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class LoanStatus(str, Enum):
    ACTIVE = 'active'
    OVERDUE = 'overdue'
    RETURNED = 'returned'


def loan_status(loan, today=None):
    """Derive the status of a loan from its current fields.

    Never stored: overdue depends on the calendar, so callers get a fresh
    answer on every read.
    """
    if loan.is_returned or loan.return_date is not None:
        return LoanStatus.RETURNED
    today = today or date.today()
    # due dates mean midnight at the start of the day, so the due day is already late
    if today >= loan.due_date:
        return LoanStatus.OVERDUE
    return LoanStatus.ACTIVE


class Author(Base):
    __tablename__ = 'authors'

    author_id = Column(Integer, primary_key=True, autoincrement=True)
    last_name = Column(String(255))
    first_name = Column(String(255))
    middle_name = Column(String(255))

    books = relationship('Book', back_populates='author', order_by='Book.book_id')

    @property
    def full_name(self):
        return ' '.join(part or '' for part in (self.last_name, self.first_name, self.middle_name))


class Book(Base):
    __tablename__ = 'books'

    book_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    year = Column(Integer, nullable=True)
    author_id = Column(Integer, ForeignKey('authors.author_id'), nullable=False)
    language = Column(String(64))
    pages = Column(Integer, nullable=True)

    author = relationship('Author', back_populates='books')
    copies = relationship('Copy', order_by='Copy.copy_id')

    @property
    def author_name(self):
        if self.author is not None and self.author.full_name.strip():
            return self.author.full_name
        return 'Author not specified'


class Copy(Base):
    __tablename__ = 'bookcopies'

    copy_id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Integer, ForeignKey('books.book_id'), nullable=False)
    # written only by the loan workflow, mirrors "no open loan for this copy"
    is_available = Column(Boolean, nullable=False, default=True)


class Reader(Base):
    __tablename__ = 'readers'

    reader_id = Column('user_id', Integer, primary_key=True, autoincrement=True)
    last_name = Column(String(255))
    first_name = Column(String(255))
    middle_name = Column(String(255))
    birth_date = Column(Date, nullable=True)
    phone = Column(String(255))
    email = Column(String(255))
    address = Column(String(500))
    # written only by the loan workflow, mirrors "reader has an open loan"
    has_active_loan = Column('get_rent', Boolean, nullable=False, default=False)
    must_return_by = Column('must_return', Date, nullable=True)

    @property
    def full_name(self):
        return f"{self.last_name or ''} {self.first_name or ''} {self.middle_name or ''}".strip()


class Loan(Base):
    __tablename__ = 'loans'

    loan_id = Column(Integer, primary_key=True, autoincrement=True)
    reader_id = Column('user_id', Integer, ForeignKey('readers.user_id'), nullable=False)
    copy_id = Column(Integer, ForeignKey('bookcopies.copy_id'), nullable=False)
    issue_date = Column('bear_date', Date, nullable=False)
    due_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)  # NULL while the copy is still out
    is_returned = Column(Boolean, nullable=False, default=False)

    @property
    def is_open(self):
        return self.return_date is None and not self.is_returned

    @property
    def status(self):
        return loan_status(self)

    @property
    def is_overdue(self):
        return loan_status(self) == LoanStatus.OVERDUE


class Block(Base):
    __tablename__ = 'blocks'

    block_id = Column(Integer, primary_key=True, autoincrement=True)
    reader_id = Column('user_id', Integer, ForeignKey('readers.user_id'), nullable=False)
    is_blocked = Column(Boolean, nullable=True)
    reason = Column('block_reason', String(500))
    paid_amount = Column(Integer, nullable=True)
