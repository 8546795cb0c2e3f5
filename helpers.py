from collections import namedtuple
from datetime import date

from definitions import LoanStatus, loan_status

FlagDrift = namedtuple('FlagDrift', ['entity', 'entity_id', 'description'])


def loan_to_dict(loan, today=None):
    return {
        "loan_id": loan.loan_id,
        "reader_id": loan.reader_id,
        "copy_id": loan.copy_id,
        "issue_date": loan.issue_date.isoformat(),
        "due_date": loan.due_date.isoformat(),
        "return_date": loan.return_date.isoformat() if loan.return_date else None,
        "is_returned": loan.is_returned,
        "status": loan_status(loan, today).value,
    }


def reader_to_dict(reader):
    return {
        "reader_id": reader.reader_id,
        "full_name": reader.full_name,
        "email": reader.email,
        "phone": reader.phone,
        "has_active_loan": reader.has_active_loan,
        "must_return_by": reader.must_return_by.isoformat() if reader.must_return_by else None,
    }


def available_copy_info(copy, book):
    title = book.title or "Untitled"
    year = book.year or 0
    return {
        "copy_id": copy.copy_id,
        "title": title,
        "author_name": book.author_name,
        "year": year,
        "display_info": f"{title} ({book.author_name}, {year})",
    }


def loan_overview(loans, today=None):
    """Counts shown above the loan list: open loans and how many are overdue."""
    today = today or date.today()
    open_loans = [loan for loan in loans if loan.is_open]
    overdue = [loan for loan in open_loans if loan_status(loan, today) == LoanStatus.OVERDUE]
    return {"active": len(open_loans), "overdue": len(overdue)}


def audit_flags(store):
    """Compare the cached availability flags with the loans actually open.

    Returns one FlagDrift per broken rule; an empty list means every copy and
    reader agrees with the loan table.
    """
    drift = []

    for copy in store.list_copies():
        open_loans = store.find_open_loans_for_copy(copy.copy_id)
        if len(open_loans) > 1:
            drift.append(FlagDrift('copy', copy.copy_id,
                                   f"{len(open_loans)} open loans for one copy"))
        if copy.is_available and open_loans:
            drift.append(FlagDrift('copy', copy.copy_id, "flagged available while on loan"))
        if not copy.is_available and not open_loans:
            drift.append(FlagDrift('copy', copy.copy_id, "flagged unavailable with no open loan"))

    for reader in store.list_readers():
        open_loans = store.find_open_loans_for_reader(reader.reader_id)
        if len(open_loans) > 1:
            drift.append(FlagDrift('reader', reader.reader_id,
                                   f"{len(open_loans)} open loans for one reader"))
        if reader.has_active_loan and not open_loans:
            drift.append(FlagDrift('reader', reader.reader_id, "flagged with a loan but has none open"))
        if not reader.has_active_loan and open_loans:
            drift.append(FlagDrift('reader', reader.reader_id, "has an open loan but is not flagged"))

    return drift
