"""Read-side views: dashboard, per-week matches and player statistics.

Every function takes the tournament id explicitly; nothing here looks up an
"active" tournament on its own.
"""
from typing import Dict, List, Optional

from league.models import Match, Team, Tournament, WeeklyDuty, WeeklyMatchup
from .lineup import resolve_side


def standings(tournament_id: int) -> List[dict]:
    teams = Team.query.filter_by(tournament_id=tournament_id).all()
    teams.sort(key=lambda t: (-(t.total_score or 0), t.name))
    return [t.to_dict() for t in teams]


def matchups_for_week(tournament_id: int, week: int) -> List[WeeklyMatchup]:
    return (
        WeeklyMatchup.query.filter_by(tournament_id=tournament_id, week=week)
        .order_by(WeeklyMatchup.id)
        .all()
    )


def dashboard(tournament_id: int) -> Optional[dict]:
    tournament = Tournament.query.filter_by(id=tournament_id).first()
    if not tournament:
        return None

    matchups = (
        WeeklyMatchup.query.filter_by(tournament_id=tournament.id)
        .order_by(WeeklyMatchup.week, WeeklyMatchup.id)
        .all()
    )
    duties = {d.week: d for d in WeeklyDuty.query.filter_by(tournament_id=tournament.id).all()}

    weekly: Dict[int, dict] = {}
    for week in range(1, tournament.num_weeks + 1):
        weekly[week] = {
            'matchups': [wm.to_dict() for wm in matchups if wm.week == week],
            'duties': duties[week].to_dict() if week in duties else None,
        }

    payload = tournament.to_dict()
    payload['teams'] = [t.to_dict(include_players=True) for t in tournament.teams]
    payload['standings'] = standings(tournament.id)
    payload['weekly_data'] = weekly
    return payload


def player_stats(tournament_id: int) -> List[dict]:
    """Raw points per player; substitutes are credited instead of the player they replaced."""
    stats: Dict[str, dict] = {}
    for team in Team.query.filter_by(tournament_id=tournament_id).all():
        for player in team.players:
            stats[f"player-{player.id}"] = {
                'name': player.name,
                'team_name': team.name,
                'team_color': team.color,
                'is_substitute': False,
                'total_points': 0,
                'matches_played': 0,
            }

    matches = (
        Match.query.join(WeeklyMatchup, Match.weekly_matchup_id == WeeklyMatchup.id)
        .filter(WeeklyMatchup.tournament_id == tournament_id)
        .all()
    )
    for match in matches:
        if not match.is_scored:
            continue
        for side, points in (('A', match.score_a), ('B', match.score_b)):
            lineup = resolve_side(match, side)
            entry = stats.setdefault(lineup.key, {
                'name': lineup.name,
                'team_name': '',
                'team_color': '',
                'is_substitute': lineup.is_substitute,
                'total_points': 0,
                'matches_played': 0,
            })
            entry['total_points'] += points
            entry['matches_played'] += 1

    rows = []
    for entry in stats.values():
        played = entry['matches_played']
        entry['average'] = round(entry['total_points'] / played, 2) if played else 0
        rows.append(entry)
    rows.sort(key=lambda r: (-r['total_points'], r['name']))
    return rows
