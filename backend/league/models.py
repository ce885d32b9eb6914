from datetime import datetime, timezone
import json

from flask_login import UserMixin

from league import db, bcrypt
from league.services.matches.lineup import DEFAULT_LEVEL, resolve_side


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


class AdminUser(UserMixin, db.Model):
    __tablename__ = 'admin_user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Tournament(db.Model):
    __tablename__ = 'tournament'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    num_weeks = db.Column(db.Integer, nullable=False, default=10)
    current_week = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.String(16), nullable=False, default='active')  # draft, active, ended
    week_dates = db.Column(db.Text, nullable=True)  # JSON-encoded {week: "YYYY-MM-DD"}
    ended_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    teams = db.relationship('Team', back_populates='tournament', order_by='Team.id')

    def get_week_dates(self):
        try:
            return json.loads(self.week_dates) if self.week_dates else {}
        except ValueError:
            return {}

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'num_weeks': self.num_weeks,
            'current_week': self.current_week,
            'status': self.status,
            'week_dates': self.get_week_dates(),
            'ended_at': _iso(self.ended_at),
            'created_at': _iso(self.created_at),
        }


class Team(db.Model):
    __tablename__ = 'team'
    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(db.Integer, db.ForeignKey('tournament.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(7), nullable=False)  # hex, e.g. #EF4444
    total_score = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    tournament = db.relationship('Tournament', back_populates='teams')
    players = db.relationship('Player', back_populates='team', order_by='Player.position')

    def to_dict(self, include_players=False):
        data = {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'name': self.name,
            'color': self.color,
            'total_score': self.total_score,
        }
        if include_players:
            data['players'] = [p.to_dict() for p in self.players]
        return data


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(db.Integer, db.ForeignKey('tournament.id'), nullable=False, index=True)
    team_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    player_code = db.Column(db.String(50), nullable=True)
    level = db.Column(db.Integer, nullable=False, default=DEFAULT_LEVEL)
    position = db.Column(db.Integer, nullable=False)  # 1-5 within the team
    is_captain = db.Column(db.Boolean, nullable=False, default=False)
    team = db.relationship('Team', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'team_id': self.team_id,
            'name': self.name,
            'level': self.level,
            'position': self.position,
            'is_captain': self.is_captain,
        }


class Reserve(db.Model):
    __tablename__ = 'reserve'
    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(db.Integer, db.ForeignKey('tournament.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    level = db.Column(db.Integer, nullable=False, default=DEFAULT_LEVEL)
    suggested_position = db.Column(db.String(10), nullable=True)  # e.g. "1", "2-3"
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'level': self.level,
            'suggested_position': self.suggested_position,
            'is_active': self.is_active,
        }


class WeeklyMatchup(db.Model):
    __tablename__ = 'weekly_matchup'
    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(db.Integer, db.ForeignKey('tournament.id'), nullable=False, index=True)
    week = db.Column(db.Integer, nullable=False)
    team_a_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False)
    team_b_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False)
    team_a_score = db.Column(db.Integer, nullable=False, default=0)
    team_b_score = db.Column(db.Integer, nullable=False, default=0)
    is_complete = db.Column(db.Boolean, nullable=False, default=False)
    team_a = db.relationship('Team', foreign_keys=[team_a_id])
    team_b = db.relationship('Team', foreign_keys=[team_b_id])
    matches = db.relationship('Match', back_populates='weekly_matchup', order_by='Match.position')

    def to_dict(self, include_matches=True):
        data = {
            'id': self.id,
            'week': self.week,
            'team_a': self.team_a.to_dict() if self.team_a else None,
            'team_b': self.team_b.to_dict() if self.team_b else None,
            'team_a_score': self.team_a_score,
            'team_b_score': self.team_b_score,
            'is_complete': self.is_complete,
        }
        if include_matches:
            data['matches'] = [m.to_dict() for m in self.matches]
        return data


class Match(db.Model):
    __tablename__ = 'match'
    id = db.Column(db.Integer, primary_key=True)
    weekly_matchup_id = db.Column(db.Integer, db.ForeignKey('weekly_matchup.id'), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)  # 1-5
    player_a_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    player_b_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    substitute_a_id = db.Column(db.Integer, db.ForeignKey('reserve.id'), nullable=True)
    substitute_b_id = db.Column(db.Integer, db.ForeignKey('reserve.id'), nullable=True)
    custom_substitute_a_name = db.Column(db.String(255), nullable=True)
    custom_substitute_a_level = db.Column(db.Integer, nullable=True)
    custom_substitute_b_name = db.Column(db.String(255), nullable=True)
    custom_substitute_b_level = db.Column(db.Integer, nullable=True)
    score_a = db.Column(db.Integer, nullable=True)  # null until played
    score_b = db.Column(db.Integer, nullable=True)
    # Percentage; positive reduces A's score, negative reduces B's
    handicap = db.Column(db.Integer, nullable=False, default=0)
    scored_at = db.Column(db.DateTime, nullable=True)  # first score entry, never moved
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    weekly_matchup = db.relationship('WeeklyMatchup', back_populates='matches')
    player_a = db.relationship('Player', foreign_keys=[player_a_id])
    player_b = db.relationship('Player', foreign_keys=[player_b_id])
    substitute_a = db.relationship('Reserve', foreign_keys=[substitute_a_id])
    substitute_b = db.relationship('Reserve', foreign_keys=[substitute_b_id])

    @property
    def is_scored(self):
        return self.score_a is not None and self.score_b is not None

    def to_dict(self):
        return {
            'id': self.id,
            'weekly_matchup_id': self.weekly_matchup_id,
            'position': self.position,
            'player_a_id': self.player_a_id,
            'player_b_id': self.player_b_id,
            'side_a': resolve_side(self, 'A').to_dict(),
            'side_b': resolve_side(self, 'B').to_dict(),
            'score_a': self.score_a,
            'score_b': self.score_b,
            'handicap': self.handicap,
            'scored_at': _iso(self.scored_at),
        }


class WeeklyDuty(db.Model):
    __tablename__ = 'weekly_duty'
    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(db.Integer, db.ForeignKey('tournament.id'), nullable=False, index=True)
    week = db.Column(db.Integer, nullable=False)
    dinner_team_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False)
    cleanup_team_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False)
    dinner_team = db.relationship('Team', foreign_keys=[dinner_team_id])
    cleanup_team = db.relationship('Team', foreign_keys=[cleanup_team_id])

    def to_dict(self):
        return {
            'week': self.week,
            'dinner_team': self.dinner_team.to_dict() if self.dinner_team else None,
            'cleanup_team': self.cleanup_team.to_dict() if self.cleanup_team else None,
        }
