import logging

from results import IneligibilityReason, Ineligible, NotFound, Result

logger = logging.getLogger(__name__)


def check_eligibility(store, reader_id, copy_id):
    """Decide whether ``copy_id`` may be lent to ``reader_id``.

    Checks run in a fixed order and the first failing one is reported:
    reader exists, reader is not blocked, reader has no book on loan, copy
    exists, copy is flagged available, copy has no open loan. The last check
    queries loans directly so a stale ``is_available`` flag cannot let a copy
    go out twice. Nothing is written.
    """
    reader = store.find_reader_by_id(reader_id)
    if reader is None:
        return _reject(NotFound('reader', reader_id))

    blocks = [b for b in store.list_blocks_for_reader(reader_id) if b.is_blocked is True]
    if blocks:
        return _reject(Ineligible(IneligibilityReason.READER_BLOCKED, blocks[0].reason))

    if reader.has_active_loan:
        return _reject(Ineligible(IneligibilityReason.READER_ALREADY_HAS_LOAN))

    copy = store.find_copy_by_id(copy_id)
    if copy is None:
        return _reject(NotFound('copy', copy_id))

    if not copy.is_available:
        return _reject(Ineligible(IneligibilityReason.COPY_UNAVAILABLE))

    if store.find_open_loans_for_copy(copy_id):
        return _reject(Ineligible(IneligibilityReason.COPY_ALREADY_LOANED))

    return Result.success()


def _reject(error):
    logger.warning("loan refused: %s", error.message)
    return Result.failure(error)
