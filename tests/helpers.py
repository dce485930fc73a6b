from collections import defaultdict

from bingo import SOCKET_NAMESPACE


def drain(test_client):
    """Map of event name to payloads received since the last drain."""
    received = defaultdict(list)
    for pkt in test_client.get_received(SOCKET_NAMESPACE):
        received[pkt['name']].append(pkt['args'][0] if pkt['args'] else None)
    return received


def run_countdown(bingo_round):
    while bingo_round.countdown_timer.fire():
        pass


def rig_pool(bingo_round, first_numbers):
    """Move `first_numbers` to the front of the call pool, keeping the rest."""
    rest = [n for n in bingo_round.call_pool if n not in first_numbers]
    bingo_round.call_pool = list(first_numbers) + rest


def call_numbers(bingo_round, count):
    for _ in range(count):
        bingo_round.calling_timer.fire()
