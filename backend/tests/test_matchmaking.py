from arena.services.connections import Connection
from arena.services.matchmaking import MatchmakingQueue


def conn(sid, user_id, name=None):
    return Connection(sid, user_id=user_id, name=name or f'user{user_id}')


def test_first_arrival_waits_second_pairs():
    queue = MatchmakingQueue()
    alice, bob = conn('s1', 1), conn('s2', 2)

    assert queue.enqueue_or_pair('prisoners_dilemma', alice) == ('prisoners_dilemma', None)
    assert queue.waiting('prisoners_dilemma') is alice

    mode, waiter = queue.enqueue_or_pair('prisoners_dilemma', bob)
    assert mode == 'prisoners_dilemma'
    assert waiter is alice
    assert queue.waiting('prisoners_dilemma') is None


def test_modes_have_separate_slots():
    queue = MatchmakingQueue()
    alice, bob = conn('s1', 1), conn('s2', 2)
    queue.enqueue_or_pair('prisoners_dilemma', alice)
    assert queue.enqueue_or_pair('ultimatum', bob) == ('ultimatum', None)
    assert queue.waiting('prisoners_dilemma') is alice
    assert queue.waiting('ultimatum') is bob


def test_unknown_mode_falls_back_to_default():
    queue = MatchmakingQueue(default_mode='ultimatum')
    alice = conn('s1', 1)
    assert queue.enqueue_or_pair('tic_tac_toe', alice) == ('ultimatum', None)
    assert queue.waiting('ultimatum') is alice


def test_never_pairs_same_connection_or_identity():
    queue = MatchmakingQueue()
    alice = conn('s1', 1)
    alice_other_tab = conn('s9', 1)

    queue.enqueue_or_pair('prisoners_dilemma', alice)
    assert queue.enqueue_or_pair('prisoners_dilemma', alice) == ('prisoners_dilemma', None)
    assert queue.waiting('prisoners_dilemma') is alice

    # same identity on another connection replaces the waiter instead of pairing
    assert queue.enqueue_or_pair('prisoners_dilemma', alice_other_tab) == ('prisoners_dilemma', None)
    assert queue.waiting('prisoners_dilemma') is alice_other_tab


def test_switching_modes_keeps_one_entry_per_connection():
    queue = MatchmakingQueue()
    alice = conn('s1', 1)
    queue.enqueue_or_pair('prisoners_dilemma', alice)
    queue.enqueue_or_pair('ultimatum', alice)
    assert queue.waiting('prisoners_dilemma') is None
    assert queue.waiting('ultimatum') is alice


def test_discard_clears_slot():
    queue = MatchmakingQueue()
    alice, bob = conn('s1', 1), conn('s2', 2)
    queue.enqueue_or_pair('ultimatum', alice)
    assert queue.discard(bob) is False
    assert queue.discard(alice) is True
    assert queue.waiting('ultimatum') is None
    # the next arrival now waits instead of pairing with a gone player
    assert queue.enqueue_or_pair('ultimatum', bob) == ('ultimatum', None)


def test_closed_waiter_is_not_paired():
    queue = MatchmakingQueue()
    alice, bob = conn('s1', 1), conn('s2', 2)
    queue.enqueue_or_pair('prisoners_dilemma', alice)
    alice.close()
    assert queue.enqueue_or_pair('prisoners_dilemma', bob) == ('prisoners_dilemma', None)
    assert queue.waiting('prisoners_dilemma') is bob
