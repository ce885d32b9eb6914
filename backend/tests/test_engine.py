import random
from dataclasses import replace

from league.services.live_scoring.engine import (
    MAX_HISTORY_LENGTH,
    MatchInfo,
    PlayerInfo,
    Reset,
    Restore,
    ScorePoint,
    ScoringState,
    SelectServiceBox,
    SetServer,
    Undo,
    can_undo,
    initialize,
    reduce,
    score_point,
    select_service_box,
    set_server,
    undo,
)


MATCH = MatchInfo(
    id=7,
    player_a=PlayerInfo(name='Alice', team_color='#EF4444'),
    player_b=PlayerInfo(name='Bob', team_color='#3B82F6'),
)


def fresh():
    return initialize(MATCH, now=1_000)


def play(state, scorers, start=2_000):
    for i, scorer in enumerate(scorers):
        state = score_point(state, scorer, now=start + i)
    return state


def test_initialize_defaults():
    s = fresh()
    assert (s.score_a, s.score_b) == (0, 0)
    assert s.server == 'A'
    assert s.service_box == 'R'
    assert s.is_handout is True
    assert s.match_start_time == 1_000
    assert s.history == ()
    assert s.status == 'in_progress'
    assert not can_undo(s)


def test_undo_restores_previous_state_except_history():
    rng = random.Random(42)
    state = fresh()
    for i in range(40):
        if rng.random() < 0.3:
            state = select_service_box(state, rng.choice('LR'))
        before = state
        after = score_point(state, rng.choice('AB'), now=5_000 + i)
        reverted = undo(after)
        assert replace(reverted, history=before.history) == before
        state = after


def test_scores_add_up_to_points_played():
    rng = random.Random(7)
    scorers = [rng.choice('AB') for _ in range(37)]
    state = play(fresh(), scorers)
    assert state.score_a + state.score_b == 37
    assert state.score_a == scorers.count('A')


def test_handout_and_server_hold():
    s = select_service_box(fresh(), 'R')
    assert s.is_handout is False

    held = score_point(s, 'A')
    assert held.server == 'A'
    assert held.is_handout is False
    assert held.service_box == 'L'

    lost = score_point(held, 'B')
    assert lost.server == 'B'
    assert lost.is_handout is True
    # B never chose a box, so the default right box is offered
    assert lost.service_box == 'R'


def test_handout_uses_preferred_box():
    s = score_point(fresh(), 'B')
    s = select_service_box(s, 'L')
    assert s.preferred_box.B == 'L'
    s = score_point(s, 'A')
    s = score_point(s, 'B')
    assert s.server == 'B'
    assert s.is_handout is True
    assert s.service_box == 'L'


def test_select_service_box_only_during_handout():
    s = play(fresh(), ['A'])
    assert s.is_handout is False
    assert select_service_box(s, 'R') == s
    assert reduce(s, SelectServiceBox('R')) == s


def test_select_service_box_ignores_unknown_box():
    s = fresh()
    assert select_service_box(s, 'X') == s


def test_unknown_scorer_is_ignored():
    s = fresh()
    assert score_point(s, 'C') == s
    assert set_server(s, 'C') == s


def test_history_keeps_most_recent_fifty():
    scorers = ['A', 'B'] * 30
    state = play(fresh(), scorers, start=10_000)
    assert len(state.history) == MAX_HISTORY_LENGTH
    timestamps = [e.timestamp for e in state.history]
    assert timestamps == list(range(10_010, 10_060))
    assert state.score_a + state.score_b == 60


def test_undo_past_history_cap_stops():
    state = play(fresh(), ['A'] * 55)
    for _ in range(MAX_HISTORY_LENGTH):
        state = undo(state)
    assert state.score_a == 5
    assert not can_undo(state)
    assert undo(state) == state


def test_alice_and_bob_undo_scenario():
    s = fresh()
    s = select_service_box(s, 'R')
    s = play(s, ['A', 'A', 'A', 'B'])
    # Operator confirms B's box after the handout
    s = select_service_box(s, 'R')
    after_first_b = s
    s = score_point(s, 'B')
    s = undo(s)

    assert (s.score_a, s.score_b) == (3, 1)
    assert s.server == 'B'
    assert s.is_handout is False
    assert s.service_box == 'R'
    assert len(s.history) == 4
    assert replace(s, history=after_first_b.history) == after_first_b


def test_set_server_forces_handout():
    s = select_service_box(fresh(), 'L')
    s = set_server(s, 'B')
    assert s.server == 'B'
    assert s.is_handout is True
    assert s.service_box == 'R'


def test_reduce_dispatches_actions():
    s = fresh()
    s = reduce(s, ScorePoint('A'), now=3_000)
    assert s.history[-1].timestamp == 3_000
    s = reduce(s, SetServer('B'))
    assert s.server == 'B'
    s = reduce(s, Undo())
    assert s.score_a == 0

    saved = play(fresh(), ['A', 'B', 'B'])
    assert reduce(s, Restore(saved)) == saved

    reset = reduce(saved, Reset(MATCH), now=9_000)
    assert reset == initialize(MATCH, now=9_000)


def test_state_dict_round_trip_uses_wire_names():
    s = play(select_service_box(fresh(), 'L'), ['A', 'B'])
    data = s.to_dict()
    assert data['matchId'] == 7
    assert data['playerA'] == {'name': 'Alice', 'teamColor': '#EF4444'}
    assert set(data['history'][0]) == {
        'timestamp', 'scorer', 'scoreA', 'scoreB', 'server', 'serviceBox', 'isHandout'
    }
    assert ScoringState.from_dict(data) == s
