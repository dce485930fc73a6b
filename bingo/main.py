from flask import Blueprint, jsonify
from bingo.services.game import get_round

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Bingo server is running'})


@main.route('/state', methods=['GET'])
def round_state():
    """Public snapshot of the shared round, same shape as the `init` event."""
    return jsonify(get_round().snapshot())
