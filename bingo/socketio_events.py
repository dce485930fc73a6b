from flask import current_app, request
from flask_socketio import emit

from bingo import SOCKET_NAMESPACE, socketio
from bingo.exceptions import RejectedClaim, RejectedRegistration
from bingo.services.game import get_round


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _blocked(reason: str) -> None:
    emit('blocked', {'reason': reason})


def handle_connect(auth=None):
    emit('init', get_round().snapshot(_get_sid()))


def handle_disconnect(reason=None):
    get_round().leave(_get_sid())


def handle_register(data=None):
    if not isinstance(data, dict):
        data = {}
    sid = _get_sid()
    try:
        get_round().register(sid, data.get('username'), data.get('seed'))
    except RejectedRegistration as exc:
        current_app.logger.info(f"[register-blocked] sid={sid} reason={exc}")
        _blocked(str(exc))


def handle_check_bingo(data=None):
    # Accept both {'marked': [...]} and a bare list of numbers
    marked = data.get('marked') if isinstance(data, dict) else data
    sid = _get_sid()
    try:
        get_round().claim(sid, marked)
    except RejectedClaim as exc:
        current_app.logger.info(f"[claim-blocked] sid={sid} reason={exc}")
        _blocked(str(exc))


def handle_play_again(data=None):
    sid = _get_sid()
    try:
        get_round().play_again(sid)
    except RejectedRegistration as exc:
        current_app.logger.info(f"[play-again-blocked] sid={sid} reason={exc}")
        _blocked(str(exc))


def handle_end_game(data=None):
    get_round().leave(_get_sid())


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the game namespace."""
    socketio.on_event('connect', handle_connect, namespace=SOCKET_NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=SOCKET_NAMESPACE)
    socketio.on_event('register', handle_register, namespace=SOCKET_NAMESPACE)
    socketio.on_event('checkBingo', handle_check_bingo, namespace=SOCKET_NAMESPACE)
    socketio.on_event('playAgain', handle_play_again, namespace=SOCKET_NAMESPACE)
    socketio.on_event('endGame', handle_end_game, namespace=SOCKET_NAMESPACE)
