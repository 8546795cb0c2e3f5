import logging
from datetime import date

from flask import request, jsonify, Blueprint, g

from helpers import available_copy_info, loan_overview, loan_to_dict, reader_to_dict
from loans import DurationPolicy
from results import AlreadyReturned, Ineligible, NotFound

routes_blueprint = Blueprint('routes', __name__)
logger = logging.getLogger(__name__)


class InvalidPayload(ValueError):
    pass


def _error_response(error):
    if isinstance(error, NotFound):
        status = 404
    elif isinstance(error, (Ineligible, AlreadyReturned)):
        status = 400
    else:
        status = 500
    body = {'error': error.message, 'code': error.code}
    if isinstance(error, Ineligible):
        body['reason'] = error.reason.value
    return jsonify(body), status


def _parse_date(data, key):
    raw = data.get(key)
    if raw is None:
        return None
    try:
        return date.fromisoformat(raw)
    except (TypeError, ValueError):
        raise InvalidPayload(f"'{key}' must be a date in YYYY-MM-DD format")


def _parse_policy(data):
    raw = data.get('policy', DurationPolicy.TWO_WEEKS.name)
    try:
        return DurationPolicy[str(raw).upper()]
    except KeyError:
        raise InvalidPayload(f"'policy' must be one of {', '.join(p.name for p in DurationPolicy)}")


def _parse_id(data, key):
    raw = data.get(key)
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise InvalidPayload(f"'{key}' must be an integer")
    return raw


@routes_blueprint.errorhandler(InvalidPayload)
def bad_request(exc):
    return jsonify({'error': str(exc), 'code': 'bad_request'}), 400


@routes_blueprint.post('/loans')
def loanBook():
    data = request.get_json(silent=True)
    logger.debug("loan request: %s", data)
    if not isinstance(data, dict) or not data:
        return jsonify({'error': 'No data provided', 'code': 'bad_request'}), 400

    reader_id = _parse_id(data, 'reader_id')
    copy_id = _parse_id(data, 'copy_id')
    issue_date = _parse_date(data, 'issue_date')
    due_date = _parse_date(data, 'due_date')
    policy = _parse_policy(data)

    result = g.workflow.issue_loan(reader_id, copy_id,
                                   issue_date=issue_date,
                                   policy=policy,
                                   due_date=due_date)
    if not result.ok:
        return _error_response(result.error)
    return jsonify(loan_to_dict(result.value)), 201


@routes_blueprint.post('/loans/<int:loan_id>/return')
def returnBook(loan_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    logger.debug("return request for loan %s: %s", loan_id, data)
    return_date = _parse_date(data, 'return_date')

    result = g.workflow.return_loan(loan_id, return_date)
    if not result.ok:
        return _error_response(result.error)
    return jsonify(loan_to_dict(result.value)), 200


@routes_blueprint.get('/loans')
def getLoans():
    loans = g.store.list_open_loans()
    return jsonify({
        'loans': [loan_to_dict(loan) for loan in loans],
        'overview': loan_overview(loans),
    }), 200


@routes_blueprint.get('/loans/<int:loan_id>')
def getLoan(loan_id):
    loan = g.store.find_loan_by_id(loan_id)
    if loan is None:
        return _error_response(NotFound('loan', loan_id))
    return jsonify(loan_to_dict(loan)), 200


@routes_blueprint.get('/copies/available')
def getAvailableCopies():
    rows = g.store.list_available_copies()
    return jsonify({'copies': [available_copy_info(copy, book) for copy, book in rows]}), 200


@routes_blueprint.get('/readers/eligible')
def getEligibleReaders():
    readers = g.store.list_eligible_readers()
    return jsonify({'readers': [reader_to_dict(reader) for reader in readers]}), 200
