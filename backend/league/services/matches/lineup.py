"""Who actually plays each side of a match.

A side is occupied by exactly one of: the rostered player, a reserve from
the tournament's reserve list, or a custom (non-member) substitute given by
name and optional level. ``occupant_for`` makes that choice once;
everything else works from the resolved ``SideLineup``.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from league.services.live_scoring.engine import MatchInfo, PlayerInfo

DEFAULT_LEVEL = 500000
DEFAULT_TEAM_COLOR = "#6B7280"


@dataclass(frozen=True)
class RegularPlayer:
    player: Any


@dataclass(frozen=True)
class ReserveSubstitute:
    reserve: Any


@dataclass(frozen=True)
class CustomSubstitute:
    name: str
    level: Optional[int] = None


SideOccupant = Union[RegularPlayer, ReserveSubstitute, CustomSubstitute]


@dataclass(frozen=True)
class SideLineup:
    key: str
    name: str
    level: int
    team_color: str
    is_substitute: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'level': self.level,
            'teamColor': self.team_color,
            'isSubstitute': self.is_substitute,
        }


def _side_fields(match, side: str):
    if side == 'A':
        return match.player_a, match.substitute_a, match.custom_substitute_a_name, match.custom_substitute_a_level
    return match.player_b, match.substitute_b, match.custom_substitute_b_name, match.custom_substitute_b_level


def occupant_for(match, side: str) -> SideOccupant:
    player, reserve, custom_name, custom_level = _side_fields(match, side)
    if reserve is not None:
        return ReserveSubstitute(reserve)
    if custom_name:
        return CustomSubstitute(custom_name, custom_level)
    return RegularPlayer(player)


def resolve_side(match, side: str) -> SideLineup:
    player = _side_fields(match, side)[0]
    team = player.team if player is not None else None
    team_color = team.color if team is not None else DEFAULT_TEAM_COLOR
    roster_level = player.level if player is not None and player.level is not None else DEFAULT_LEVEL

    occupant = occupant_for(match, side)
    if isinstance(occupant, ReserveSubstitute):
        reserve = occupant.reserve
        level = reserve.level if reserve.level is not None else DEFAULT_LEVEL
        return SideLineup(f"reserve-{reserve.id}", reserve.name, level, team_color, True)
    if isinstance(occupant, CustomSubstitute):
        # No level given for a walk-in: assume the rostered player's.
        level = occupant.level if occupant.level is not None else roster_level
        return SideLineup(f"sub-{occupant.name}", occupant.name, level, team_color, True)
    name = player.name if player is not None else f"Player {side}"
    key = f"player-{player.id}" if player is not None else f"player-{side}"
    return SideLineup(key, name, roster_level, team_color, False)


def scoring_match_info(match) -> MatchInfo:
    """MatchInfo for starting a live scoring session on this match."""
    side_a = resolve_side(match, 'A')
    side_b = resolve_side(match, 'B')
    return MatchInfo(
        id=match.id,
        player_a=PlayerInfo(name=side_a.name, team_color=side_a.team_color),
        player_b=PlayerInfo(name=side_b.name, team_color=side_b.team_color),
    )
