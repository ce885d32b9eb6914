"""Point-by-point squash scoring state machine.

A ``ScoringState`` is an immutable value. Every transition is a pure function
returning a new state; invalid actions (undo with nothing to undo, choosing a
box outside a handout, an unknown side) return the state unchanged so the
scoring screen can never be left in a broken state mid-match.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Literal, Optional, Tuple, Union

Side = Literal["A", "B"]
ServiceBox = Literal["L", "R"]

SIDES = ("A", "B")
SERVICE_BOXES = ("L", "R")
IN_PROGRESS = "in_progress"
COMPLETED = "completed"

# Undo depth; older points stay counted in the scores but can't be undone.
MAX_HISTORY_LENGTH = 50


def now_ms() -> int:
    return int(time.time() * 1000)


def other_box(box: str) -> str:
    return "L" if box == "R" else "R"


@dataclass(frozen=True)
class PlayerInfo:
    name: str
    team_color: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "teamColor": self.team_color}

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "PlayerInfo":
        return PlayerInfo(name=str(d["name"]), team_color=str(d["teamColor"]))


@dataclass(frozen=True)
class MatchInfo:
    id: int
    player_a: PlayerInfo
    player_b: PlayerInfo

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "playerA": self.player_a.to_dict(),
            "playerB": self.player_b.to_dict(),
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MatchInfo":
        return MatchInfo(
            id=int(d["id"]),
            player_a=PlayerInfo.from_dict(d["playerA"]),
            player_b=PlayerInfo.from_dict(d["playerB"]),
        )


@dataclass(frozen=True)
class PreferredBox:
    """Last box each side chose; used as the default box on a handout."""
    A: str = "R"
    B: str = "R"

    def for_side(self, side: str) -> str:
        return self.A if side == "A" else self.B

    def with_box(self, side: str, box: str) -> "PreferredBox":
        return replace(self, **{side: box})


@dataclass(frozen=True)
class PointEvent:
    """One scored point.

    Scores are the totals *after* the point; ``server``, ``service_box`` and
    ``is_handout`` are the serving conditions *before* it.
    """
    timestamp: int
    scorer: str
    score_a: int
    score_b: int
    server: str
    service_box: str
    is_handout: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "scorer": self.scorer,
            "scoreA": self.score_a,
            "scoreB": self.score_b,
            "server": self.server,
            "serviceBox": self.service_box,
            "isHandout": self.is_handout,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "PointEvent":
        return PointEvent(
            timestamp=int(d["timestamp"]),
            scorer=str(d["scorer"]),
            score_a=int(d["scoreA"]),
            score_b=int(d["scoreB"]),
            server=str(d["server"]),
            service_box=str(d["serviceBox"]),
            is_handout=bool(d["isHandout"]),
        )


@dataclass(frozen=True)
class ScoringState:
    match_id: int
    player_a: PlayerInfo
    player_b: PlayerInfo
    score_a: int = 0
    score_b: int = 0
    server: str = "A"
    service_box: str = "R"
    is_handout: bool = True
    preferred_box: PreferredBox = field(default_factory=PreferredBox)
    match_start_time: int = 0
    history: Tuple[PointEvent, ...] = ()
    status: str = IN_PROGRESS

    @property
    def points_played(self) -> bool:
        return self.score_a > 0 or self.score_b > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matchId": self.match_id,
            "playerA": self.player_a.to_dict(),
            "playerB": self.player_b.to_dict(),
            "scoreA": self.score_a,
            "scoreB": self.score_b,
            "server": self.server,
            "serviceBox": self.service_box,
            "isHandout": self.is_handout,
            "preferredBox": {"A": self.preferred_box.A, "B": self.preferred_box.B},
            "matchStartTime": self.match_start_time,
            "history": [e.to_dict() for e in self.history],
            "status": self.status,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ScoringState":
        preferred = d["preferredBox"]
        return ScoringState(
            match_id=int(d["matchId"]),
            player_a=PlayerInfo.from_dict(d["playerA"]),
            player_b=PlayerInfo.from_dict(d["playerB"]),
            score_a=int(d["scoreA"]),
            score_b=int(d["scoreB"]),
            server=str(d["server"]),
            service_box=str(d["serviceBox"]),
            is_handout=bool(d["isHandout"]),
            preferred_box=PreferredBox(A=str(preferred["A"]), B=str(preferred["B"])),
            match_start_time=int(d["matchStartTime"]),
            history=tuple(PointEvent.from_dict(e) for e in d["history"]),
            status=str(d["status"]),
        )


# =========================================================
# ACTIONS
# =========================================================

@dataclass(frozen=True)
class ScorePoint:
    scorer: str


@dataclass(frozen=True)
class SelectServiceBox:
    box: str


@dataclass(frozen=True)
class SetServer:
    server: str


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Restore:
    state: ScoringState


@dataclass(frozen=True)
class Reset:
    match_info: MatchInfo


ScoringAction = Union[ScorePoint, SelectServiceBox, SetServer, Undo, Restore, Reset]


# =========================================================
# TRANSITIONS
# =========================================================

def initialize(match_info: MatchInfo, now: Optional[int] = None) -> ScoringState:
    """Fresh state: A serves first from the right box and must confirm it."""
    return ScoringState(
        match_id=match_info.id,
        player_a=match_info.player_a,
        player_b=match_info.player_b,
        match_start_time=now_ms() if now is None else now,
    )


def score_point(state: ScoringState, scorer: str, now: Optional[int] = None) -> ScoringState:
    if scorer not in SIDES:
        return state

    new_score_a = state.score_a + 1 if scorer == "A" else state.score_a
    new_score_b = state.score_b + 1 if scorer == "B" else state.score_b

    event = PointEvent(
        timestamp=now_ms() if now is None else now,
        scorer=scorer,
        score_a=new_score_a,
        score_b=new_score_b,
        server=state.server,
        service_box=state.service_box,
        is_handout=state.is_handout,
    )

    if scorer == state.server:
        server = state.server
        service_box = other_box(state.service_box)
        is_handout = False
    else:
        server = scorer
        service_box = state.preferred_box.for_side(scorer)
        is_handout = True

    return replace(
        state,
        score_a=new_score_a,
        score_b=new_score_b,
        server=server,
        service_box=service_box,
        is_handout=is_handout,
        history=(state.history + (event,))[-MAX_HISTORY_LENGTH:],
    )


def select_service_box(state: ScoringState, box: str) -> ScoringState:
    # Only during a handout; otherwise the box alternates on its own.
    if not state.is_handout or box not in SERVICE_BOXES:
        return state
    return replace(
        state,
        service_box=box,
        is_handout=False,
        preferred_box=state.preferred_box.with_box(state.server, box),
    )


def set_server(state: ScoringState, side: str) -> ScoringState:
    if side not in SIDES:
        return state
    return replace(
        state,
        server=side,
        service_box=state.preferred_box.for_side(side),
        is_handout=True,
    )


def undo(state: ScoringState) -> ScoringState:
    if not state.history:
        return state
    last = state.history[-1]
    return replace(
        state,
        score_a=last.score_a - 1 if last.scorer == "A" else last.score_a,
        score_b=last.score_b - 1 if last.scorer == "B" else last.score_b,
        server=last.server,
        service_box=last.service_box,
        is_handout=last.is_handout,
        history=state.history[:-1],
    )


def restore(state: ScoringState, saved: ScoringState) -> ScoringState:
    return saved


def can_undo(state: ScoringState) -> bool:
    return len(state.history) > 0


def reduce(state: ScoringState, action: ScoringAction, now: Optional[int] = None) -> ScoringState:
    """Apply one action; ``now`` stamps new points and fresh states."""
    if isinstance(action, ScorePoint):
        return score_point(state, action.scorer, now=now)
    if isinstance(action, SelectServiceBox):
        return select_service_box(state, action.box)
    if isinstance(action, SetServer):
        return set_server(state, action.server)
    if isinstance(action, Undo):
        return undo(state)
    if isinstance(action, Restore):
        return restore(state, action.state)
    if isinstance(action, Reset):
        return initialize(action.match_info, now=now)
    return state
