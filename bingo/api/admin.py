from flask import Blueprint, jsonify, request
from flask_login import login_required
from bingo.exceptions import LedgerError
from bingo.services.game import get_round


admin = Blueprint('admin', __name__)


@admin.errorhandler(LedgerError)
def ledger_unavailable(exc):
    return jsonify({'error': 'Ledger unavailable'}), 503


@admin.route('/list-users', methods=['GET'])
@login_required
def list_users():
    return jsonify({'users': get_round().ledger.list_accounts()})


@admin.route('/get-balance', methods=['GET'])
@login_required
def get_balance():
    username = request.args.get('username')
    balance = get_round().ledger.get_balance(username) if username else None
    if balance is None:
        return jsonify({'error': 'User not found'}), 404
    return jsonify({'balance': balance})


@admin.route('/update-balance', methods=['POST'])
@login_required
def update_balance():
    """Overwrite a balance and push it to any open session of that user."""
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    amount = data.get('amount')
    if (not isinstance(username, str) or not username
            or not isinstance(amount, int) or isinstance(amount, bool) or amount < 0):
        return jsonify({'error': 'Invalid username or amount'}), 400

    get_round().apply_balance_override(username, amount)
    return jsonify({'success': True})
