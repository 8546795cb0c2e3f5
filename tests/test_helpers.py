from datetime import date

from helpers import audit_flags, available_copy_info, loan_overview, loan_to_dict


def test_loan_to_dict(make_reader, make_copy, make_loan):
    loan = make_loan(make_reader(), make_copy(), issue_date=date(2024, 1, 1), due_date=date(2024, 1, 15))

    data = loan_to_dict(loan, today=date(2024, 1, 20))

    assert data["issue_date"] == "2024-01-01"
    assert data["due_date"] == "2024-01-15"
    assert data["return_date"] is None
    assert data["is_returned"] is False
    assert data["status"] == "overdue"


def test_available_copy_info(store, make_copy):
    make_copy(title="Oblomov", year=1859)

    (copy, book), = store.list_available_copies()
    info = available_copy_info(copy, book)

    assert info["title"] == "Oblomov"
    assert info["author_name"] == "Tolstoy Leo Nikolayevich"
    assert info["display_info"] == "Oblomov (Tolstoy Leo Nikolayevich, 1859)"


def test_loan_overview_counts_open_and_overdue(make_reader, make_copy, make_loan):
    loans = [
        make_loan(make_reader(), make_copy(), due_date=date(2024, 1, 15)),
        make_loan(make_reader(), make_copy(), due_date=date(2024, 3, 1)),
        make_loan(make_reader(), make_copy(), due_date=date(2024, 1, 10),
                  return_date=date(2024, 1, 9), is_returned=True),
    ]

    assert loan_overview(loans, today=date(2024, 2, 1)) == {"active": 2, "overdue": 1}


def test_audit_is_clean_after_workflow(store, workflow, make_reader, make_copy):
    reader = make_reader()
    copy = make_copy()
    workflow.issue_loan(reader.reader_id, copy.copy_id, date(2024, 1, 1))

    assert audit_flags(store) == []


def test_audit_reports_each_kind_of_drift(store, make_reader, make_copy, make_loan):
    holder = make_reader(last_name="Holder")                  # open loan, flag never set
    make_loan(holder, make_copy(title="Flagged available"))   # copy still flagged available
    make_reader(last_name="Ghost", has_active_loan=True)      # flag set, no loan
    make_copy(title="Stuck", is_available=False)              # unavailable, no loan

    found = {(d.entity, d.description) for d in audit_flags(store)}

    assert found == {
        ("copy", "flagged available while on loan"),
        ("copy", "flagged unavailable with no open loan"),
        ("reader", "flagged with a loan but has none open"),
        ("reader", "has an open loan but is not flagged"),
    }


def test_audit_reports_double_loans(store, make_reader, make_copy, make_loan):
    reader = make_reader(has_active_loan=True)
    copy = make_copy(is_available=False)
    make_loan(reader, copy)
    make_loan(reader, copy)

    descriptions = [d.description for d in audit_flags(store)]

    assert "2 open loans for one copy" in descriptions
    assert "2 open loans for one reader" in descriptions
