import logging
from datetime import date

import pytz
from apscheduler.schedulers.background import BackgroundScheduler

from definitions import LoanStatus, loan_status
from helpers import audit_flags, loan_overview
from store import LibraryStore

logger = logging.getLogger(__name__)


def check_overdue_loans(session_factory, today=None):
    """Daily sweep: log overdue loans and any availability flag drift.

    Read-only. Overdue is derived from the due date on every read, so nothing
    needs to be written back.
    """
    today = today or date.today()
    session = session_factory()
    try:
        store = LibraryStore(session)
        loans = store.list_open_loans()
        overview = loan_overview(loans, today)
        logger.info("overdue check start: %d open loans, %d overdue",
                    overview["active"], overview["overdue"])

        for loan in loans:
            if loan_status(loan, today) == LoanStatus.OVERDUE:
                logger.info("loan %s overdue since %s (reader %s, copy %s)",
                            loan.loan_id, loan.due_date.isoformat(), loan.reader_id, loan.copy_id)

        drift = audit_flags(store)
        for item in drift:
            logger.warning("flag drift on %s %s: %s", item.entity, item.entity_id, item.description)

        logger.info("overdue check done")
        return overview, drift
    finally:
        session.close()


def start_scheduler(session_factory, settings):
    timezone = pytz.timezone(settings.scheduler_timezone)
    scheduler = BackgroundScheduler(daemon=True)
    scheduler.add_job(check_overdue_loans, 'cron',
                      hour=settings.overdue_check_hour,
                      minute=settings.overdue_check_minute,
                      args=[session_factory],
                      timezone=timezone)
    scheduler.start()
    logger.info("scheduler started (%s)", timezone.zone)
    return scheduler
