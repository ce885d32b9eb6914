"""Demo data for `flask db-reset` and the test suite."""
from league import db
from league.models import Match, Player, Reserve, Team, Tournament, WeeklyDuty, WeeklyMatchup

DEMO_TEAMS = [
    ('Red', '#EF4444', ['Alice', 'Ben', 'Cara', 'Dev', 'Eli'], [620000, 560000, 510000, 470000, 430000]),
    ('Blue', '#3B82F6', ['Finn', 'Gia', 'Hugo', 'Iris', 'Jon'], [600000, 540000, 500000, 460000, 420000]),
]


def seed_demo_tournament(name='Winter Team Challenge', num_weeks=4):
    """Add one tournament with two teams, a week-1 matchup of five matches and one duty week.

    The caller owns the transaction and commits.
    """
    tournament = Tournament(name=name, num_weeks=num_weeks, current_week=1, status='active')
    db.session.add(tournament)
    db.session.flush()

    teams = []
    for team_name, color, names, levels in DEMO_TEAMS:
        team = Team(tournament_id=tournament.id, name=team_name, color=color, total_score=0)
        db.session.add(team)
        db.session.flush()
        for position, (player_name, level) in enumerate(zip(names, levels), start=1):
            db.session.add(Player(
                tournament_id=tournament.id,
                team_id=team.id,
                name=player_name,
                level=level,
                position=position,
                is_captain=position == 1,
            ))
        teams.append(team)
    db.session.add(Reserve(tournament_id=tournament.id, name='Kim', level=480000, suggested_position='3-4'))
    db.session.flush()

    team_a, team_b = teams
    matchup = WeeklyMatchup(tournament_id=tournament.id, week=1, team_a_id=team_a.id, team_b_id=team_b.id)
    db.session.add(matchup)
    db.session.flush()

    players_a = Player.query.filter_by(team_id=team_a.id).order_by(Player.position).all()
    players_b = Player.query.filter_by(team_id=team_b.id).order_by(Player.position).all()
    for position, (pa, pb) in enumerate(zip(players_a, players_b), start=1):
        db.session.add(Match(
            weekly_matchup_id=matchup.id,
            position=position,
            player_a_id=pa.id,
            player_b_id=pb.id,
        ))
    db.session.add(WeeklyDuty(tournament_id=tournament.id, week=1, dinner_team_id=team_a.id, cleanup_team_id=team_b.id))
    db.session.flush()
    return tournament
