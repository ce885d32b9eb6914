"""Score submission and handicap-adjusted roll-ups.

Totals are always re-derived from the stored match rows, never from deltas,
so resubmitting the same score is harmless. Each update (score or handicap
plus recomputation) commits as one transaction or not at all.

Recomputation for a matchup, and for each team's season total, is
serialized: a per-key lock inside the process plus ``SELECT ... FOR UPDATE``
on the rows where the database supports it.
"""
import threading
from contextlib import ExitStack, contextmanager
from typing import Dict, Optional, Tuple

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from league import db, socketio
from league.models import Match, Team, WeeklyMatchup, utcnow
from .handicap import MAX_HANDICAP, adjusted_scores, is_valid_handicap, suggested_handicap
from .lineup import resolve_side

MAX_SCORE = 999


class AggregationError(Exception):
    """Base for errors reported back to whoever submitted the update."""


class MatchNotFoundError(AggregationError):
    pass


class InvalidScoreError(AggregationError):
    pass


class InvalidHandicapError(AggregationError):
    pass


class ScoreLockedError(AggregationError):
    pass


# One lock per matchup or team id, kept for the life of the process;
# bounded by the number of rows.
_locks: Dict[Tuple[str, int], threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(kind: str, key: int) -> threading.Lock:
    with _locks_guard:
        return _locks.setdefault((kind, key), threading.Lock())


@contextmanager
def _serialized(matchup: WeeklyMatchup):
    """Hold the matchup lock, then both team locks (in id order)."""
    keys = [('matchup', matchup.id)]
    keys += [('team', team_id) for team_id in sorted({matchup.team_a_id, matchup.team_b_id})]
    with ExitStack() as stack:
        for kind, key in keys:
            stack.enter_context(_lock_for(kind, key))
        yield


def _validate_score(value, label: str, allow_none: bool = False) -> None:
    if value is None and allow_none:
        return
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidScoreError(f"Score {label} must be a whole number")
    if value < 0:
        raise InvalidScoreError("Scores cannot be negative")
    limit = current_app.config.get('MAX_SCORE', MAX_SCORE)
    if value > limit:
        raise InvalidScoreError(f"Scores cannot exceed {limit}")


def _find_match(match_id) -> Match:
    match = Match.query.filter_by(id=match_id).first()
    if not match:
        raise MatchNotFoundError("Match not found")
    return match


def _locked_match(match_id) -> Match:
    return Match.query.filter_by(id=match_id).populate_existing().with_for_update().one()


def _write_scores(match: Match, score_a: Optional[int], score_b: Optional[int]) -> None:
    was_scored = match.is_scored
    match.score_a = score_a
    match.score_b = score_b
    match.updated_at = utcnow()
    if not was_scored and match.is_scored and match.scored_at is None:
        match.scored_at = utcnow()


def _recompute_matchup_totals(matchup: WeeklyMatchup) -> WeeklyMatchup:
    matches = Match.query.filter_by(weekly_matchup_id=matchup.id).all()
    total_a = 0
    total_b = 0
    complete = True
    for m in matches:
        if not m.is_scored:
            complete = False
            continue
        adjusted_a, adjusted_b = adjusted_scores(m.score_a, m.score_b, m.handicap)
        total_a += adjusted_a
        total_b += adjusted_b
    matchup.team_a_score = total_a
    matchup.team_b_score = total_b
    matchup.is_complete = complete
    db.session.add(matchup)
    db.session.flush()
    return matchup


def _recompute_team_total(team_id: int) -> Optional[Team]:
    team = Team.query.filter_by(id=team_id).populate_existing().with_for_update().first()
    if not team:
        return None
    matchups = WeeklyMatchup.query.filter(
        WeeklyMatchup.tournament_id == team.tournament_id,
        or_(WeeklyMatchup.team_a_id == team_id, WeeklyMatchup.team_b_id == team_id),
    ).all()
    total = 0
    for wm in matchups:
        if wm.team_a_id == team_id:
            total += wm.team_a_score or 0
        else:
            total += wm.team_b_score or 0
    team.total_score = total
    db.session.add(team)
    return team


def _recompute(matchup: WeeklyMatchup) -> None:
    locked = WeeklyMatchup.query.filter_by(id=matchup.id).populate_existing().with_for_update().one()
    _recompute_matchup_totals(locked)
    _recompute_team_total(locked.team_a_id)
    _recompute_team_total(locked.team_b_id)
    current_app.logger.info(
        f"[recompute] matchup={locked.id} totals={locked.team_a_score}-{locked.team_b_score} complete={locked.is_complete}"
    )


def _notify(matchup: WeeklyMatchup) -> None:
    socketio.emit(
        'scores_updated',
        {'tournament_id': matchup.tournament_id, 'matchup_id': matchup.id},
        to=f"tournament:{matchup.tournament_id}",
        namespace='/ws',
    )


def _apply(match_id, mutate) -> Match:
    """Run ``mutate(match)`` and the recomputation as one serialized transaction.

    ``mutate`` returns False when nothing changed and no recompute is needed.
    """
    match = _find_match(match_id)
    matchup = match.weekly_matchup
    with _serialized(matchup):
        try:
            match = _locked_match(match_id)
            changed = mutate(match)
            if changed:
                _recompute(matchup)
            db.session.commit()
        except (AggregationError, SQLAlchemyError):
            db.session.rollback()
            raise
    if changed:
        _notify(matchup)
    return match


def submit_score(match_id, score_a, score_b) -> Match:
    """Public score entry.

    Once a match has both scores only an identical resubmission is accepted
    (a retry after a lost response); changing a recorded score is admin-only.
    """
    _validate_score(score_a, 'A')
    _validate_score(score_b, 'B')

    def mutate(match):
        if match.is_scored:
            if (match.score_a, match.score_b) == (score_a, score_b):
                return False
            raise ScoreLockedError("A score has already been entered for this match. Ask an admin to correct it.")
        _write_scores(match, score_a, score_b)
        current_app.logger.info(f"[score] match={match.id} score={score_a}-{score_b}")
        return True

    return _apply(match_id, mutate)


def update_score(match_id, score_a, score_b) -> Match:
    """Admin correction; either score may be cleared with None."""
    _validate_score(score_a, 'A', allow_none=True)
    _validate_score(score_b, 'B', allow_none=True)

    def mutate(match):
        _write_scores(match, score_a, score_b)
        current_app.logger.info(f"[score] admin match={match.id} score={score_a}-{score_b}")
        return True

    return _apply(match_id, mutate)


def set_handicap(match_id, handicap) -> Match:
    if not is_valid_handicap(handicap):
        raise InvalidHandicapError(f"Handicap must be a whole number between -{MAX_HANDICAP} and {MAX_HANDICAP}")

    def mutate(match):
        if match.handicap == handicap:
            return False
        match.handicap = handicap
        match.updated_at = utcnow()
        current_app.logger.info(f"[handicap] match={match.id} handicap={handicap}")
        # Unscored matches contribute nothing to the totals yet.
        return match.is_scored

    return _apply(match_id, mutate)


def recompute_matchup(matchup_id: int) -> WeeklyMatchup:
    matchup = WeeklyMatchup.query.filter_by(id=matchup_id).first()
    if not matchup:
        raise AggregationError("Weekly matchup not found")
    with _serialized(matchup):
        try:
            _recompute(matchup)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
    _notify(matchup)
    return matchup


def recompute_tournament(tournament_id: int) -> int:
    ids = [wm.id for wm in WeeklyMatchup.query.filter_by(tournament_id=tournament_id).all()]
    for matchup_id in ids:
        recompute_matchup(matchup_id)
    return len(ids)


def get_suggested_handicap(match_id) -> dict:
    match = _find_match(match_id)
    level_a = resolve_side(match, 'A').level
    level_b = resolve_side(match, 'B').level
    return {
        'suggestedHandicap': suggested_handicap(level_a, level_b),
        'levelA': level_a,
        'levelB': level_b,
    }
