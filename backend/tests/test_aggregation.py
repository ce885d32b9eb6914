import pytest

from league import db
from league.models import Match, Reserve, Team, WeeklyMatchup
from league.services.matches.aggregation import (
    InvalidHandicapError,
    InvalidScoreError,
    MatchNotFoundError,
    ScoreLockedError,
    get_suggested_handicap,
    recompute_tournament,
    set_handicap,
    submit_score,
    update_score,
)
from league.services.matches.standings import dashboard, player_stats, standings


def _matchup(seeded):
    return db.session.get(WeeklyMatchup, seeded['matchup_id'])


def _team(team_id):
    return db.session.get(Team, team_id)


def test_submit_with_handicap_updates_matchup_and_teams(seeded):
    match_id = seeded['match_ids'][0]
    match = db.session.get(Match, match_id)
    match.handicap = 10
    db.session.commit()

    submit_score(match_id, 11, 9)

    matchup = _matchup(seeded)
    assert (matchup.team_a_score, matchup.team_b_score) == (10, 9)
    assert matchup.is_complete is False
    assert _team(seeded['team_a_id']).total_score == 10
    assert _team(seeded['team_b_id']).total_score == 9


def test_incomplete_matchup_excludes_unscored_match(seeded):
    last = db.session.get(Match, seeded['match_ids'][-1])
    db.session.delete(last)
    db.session.commit()

    for match_id, (a, b) in zip(seeded['match_ids'][:3], [(11, 4), (7, 11), (11, 9)]):
        submit_score(match_id, a, b)

    matchup = _matchup(seeded)
    assert matchup.is_complete is False
    assert (matchup.team_a_score, matchup.team_b_score) == (29, 24)

    submit_score(seeded['match_ids'][3], 2, 11)
    matchup = _matchup(seeded)
    assert matchup.is_complete is True
    assert (matchup.team_a_score, matchup.team_b_score) == (31, 35)


def test_scored_at_set_once(seeded):
    match_id = seeded['match_ids'][1]
    match = submit_score(match_id, 11, 3)
    first = match.scored_at
    assert first is not None

    update_score(match_id, 11, 5)
    assert db.session.get(Match, match_id).scored_at == first


@pytest.mark.parametrize('score_a,score_b,message', [
    (-1, 5, 'Scores cannot be negative'),
    (1000, 5, 'Scores cannot exceed 999'),
    (11.5, 5, 'Score A must be a whole number'),
    (True, 5, 'Score A must be a whole number'),
    (11, '9', 'Score B must be a whole number'),
])
def test_invalid_scores_rejected_before_write(seeded, score_a, score_b, message):
    match_id = seeded['match_ids'][0]
    with pytest.raises(InvalidScoreError, match=message):
        submit_score(match_id, score_a, score_b)
    match = db.session.get(Match, match_id)
    assert match.score_a is None
    assert match.score_b is None


def test_unknown_match(seeded):
    with pytest.raises(MatchNotFoundError):
        submit_score(99999, 1, 1)
    with pytest.raises(MatchNotFoundError):
        get_suggested_handicap(99999)


def test_resubmission_is_idempotent_but_changes_are_locked(seeded):
    match_id = seeded['match_ids'][0]
    submit_score(match_id, 11, 9)
    submit_score(match_id, 11, 9)
    assert _team(seeded['team_a_id']).total_score == 11

    with pytest.raises(ScoreLockedError):
        submit_score(match_id, 9, 11)
    match = db.session.get(Match, match_id)
    assert (match.score_a, match.score_b) == (11, 9)


def test_admin_can_correct_and_clear(seeded):
    match_id = seeded['match_ids'][0]
    submit_score(match_id, 11, 9)
    update_score(match_id, 9, 11)
    assert _team(seeded['team_b_id']).total_score == 11

    update_score(match_id, None, None)
    assert _team(seeded['team_a_id']).total_score == 0
    assert _team(seeded['team_b_id']).total_score == 0


def test_handicap_change_recomputes_scored_match(seeded):
    match_id = seeded['match_ids'][0]
    submit_score(match_id, 10, 5)
    set_handicap(match_id, 20)
    assert _matchup(seeded).team_a_score == 8

    set_handicap(match_id, -20)
    matchup = _matchup(seeded)
    assert (matchup.team_a_score, matchup.team_b_score) == (10, 4)


def test_handicap_on_unscored_match_is_stored(seeded):
    match_id = seeded['match_ids'][2]
    set_handicap(match_id, 15)
    assert db.session.get(Match, match_id).handicap == 15
    assert _matchup(seeded).team_a_score == 0


@pytest.mark.parametrize('value', [55, -51, 2.5, None, '10'])
def test_invalid_handicap(seeded, value):
    with pytest.raises(InvalidHandicapError):
        set_handicap(seeded['match_ids'][0], value)


def test_team_total_spans_all_weeks(seeded):
    first = _matchup(seeded)
    week2 = WeeklyMatchup(
        tournament_id=seeded['tournament_id'], week=2,
        team_a_id=seeded['team_b_id'], team_b_id=seeded['team_a_id'],
    )
    db.session.add(week2)
    db.session.flush()
    source = db.session.get(Match, seeded['match_ids'][0])
    # Blue is side A in week 2
    rematch = Match(weekly_matchup_id=week2.id, position=1,
                    player_a_id=source.player_b_id, player_b_id=source.player_a_id)
    db.session.add(rematch)
    db.session.commit()

    submit_score(seeded['match_ids'][0], 11, 6)
    submit_score(rematch.id, 11, 8)

    assert first.team_a_score == 11
    assert _team(seeded['team_a_id']).total_score == 11 + 8
    assert _team(seeded['team_b_id']).total_score == 6 + 11


def test_recompute_tournament_repairs_totals(seeded):
    submit_score(seeded['match_ids'][0], 11, 9)
    team = _team(seeded['team_a_id'])
    team.total_score = 500
    db.session.commit()

    assert recompute_tournament(seeded['tournament_id']) == 1
    assert _team(seeded['team_a_id']).total_score == 11


def test_suggested_handicap_uses_substitute_level(seeded):
    match_id = seeded['match_ids'][0]
    result = get_suggested_handicap(match_id)
    assert result == {'suggestedHandicap': 0, 'levelA': 620000, 'levelB': 600000}

    match = db.session.get(Match, match_id)
    match.custom_substitute_b_name = 'Walk-in'
    match.custom_substitute_b_level = 310000
    db.session.commit()
    assert get_suggested_handicap(match_id)['suggestedHandicap'] == 25

    reserve = Reserve.query.filter_by(tournament_id=seeded['tournament_id']).first()
    match.substitute_a_id = reserve.id
    db.session.commit()
    result = get_suggested_handicap(match_id)
    assert result['levelA'] == 480000
    assert result['suggestedHandicap'] == 20


def test_standings_and_player_stats(seeded):
    match_ids = seeded['match_ids']
    submit_score(match_ids[0], 11, 9)
    sub_match = db.session.get(Match, match_ids[1])
    sub_match.custom_substitute_a_name = 'Zed'
    db.session.commit()
    submit_score(match_ids[1], 3, 11)

    table = standings(seeded['tournament_id'])
    assert [row['name'] for row in table] == ['Blue', 'Red']
    assert table[0]['total_score'] == 20

    stats = {row['name']: row for row in player_stats(seeded['tournament_id'])}
    assert stats['Alice']['total_points'] == 11
    assert stats['Zed']['is_substitute'] is True
    assert stats['Zed']['total_points'] == 3
    assert stats['Ben']['matches_played'] == 0
    assert stats['Gia']['average'] == 11


def test_dashboard_groups_weekly_data(seeded):
    data = dashboard(seeded['tournament_id'])
    assert data['name'] == 'Winter Team Challenge'
    assert len(data['teams']) == 2
    assert len(data['teams'][0]['players']) == 5
    week1 = data['weekly_data'][1]
    assert len(week1['matchups']) == 1
    assert len(week1['matchups'][0]['matches']) == 5
    assert week1['duties']['dinner_team']['name'] == 'Red'
    assert data['weekly_data'][2] == {'matchups': [], 'duties': None}
    assert dashboard(424242) is None
