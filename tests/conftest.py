from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from definitions import Author, Base, Block, Book, Copy, Loan, Reader
from loans import LoanWorkflow
from store import LibraryStore


@pytest.fixture
def engine(tmp_path):
    # file backed so every session gets its own connection and transaction
    engine = create_engine(f"sqlite:///{tmp_path / 'library.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(session):
    return LibraryStore(session)


@pytest.fixture
def workflow(store):
    return LoanWorkflow(store)


@pytest.fixture
def make_reader(session):
    def _make(last_name="Ivanov", first_name="Ivan", middle_name="Ivanovich", **kwargs):
        reader = Reader(last_name=last_name, first_name=first_name,
                        middle_name=middle_name, **kwargs)
        session.add(reader)
        session.commit()
        return reader
    return _make


@pytest.fixture
def make_copy(session):
    def _make(title="War and Peace", year=1869, is_available=True, book=None):
        if book is None:
            author = Author(last_name="Tolstoy", first_name="Leo", middle_name="Nikolayevich")
            book = Book(title=title, year=year, author=author)
            session.add(book)
        copy = Copy(is_available=is_available)
        book.copies.append(copy)
        session.commit()
        return copy
    return _make


@pytest.fixture
def make_block(session):
    def _make(reader, is_blocked=True, reason="Lost a book", paid_amount=None):
        block = Block(reader_id=reader.reader_id, is_blocked=is_blocked,
                      reason=reason, paid_amount=paid_amount)
        session.add(block)
        session.commit()
        return block
    return _make


@pytest.fixture
def make_loan(session):
    """Insert a loan row directly, bypassing the workflow and its flag updates."""
    def _make(reader, copy, issue_date=date(2024, 1, 1), due_date=date(2024, 1, 15),
              return_date=None, is_returned=False):
        loan = Loan(reader_id=reader.reader_id, copy_id=copy.copy_id,
                    issue_date=issue_date, due_date=due_date,
                    return_date=return_date, is_returned=is_returned)
        session.add(loan)
        session.commit()
        return loan
    return _make


@pytest.fixture
def fresh_store(session_factory):
    """Open a second session so assertions read what was actually committed."""
    sessions = []

    def _open():
        session = session_factory()
        sessions.append(session)
        return LibraryStore(session)

    yield _open
    for session in sessions:
        session.close()
