"""
League table computation from played matches.
"""
from typing import Dict, Iterable, List, Tuple

from core.models import Match, Team

WIN_POINTS = 3
DRAW_POINTS = 1
LOSS_POINTS = 0


def match_outcome(home_goals: int, away_goals: int) -> str:
    """Return 'home', 'away' or 'draw' for a final score."""
    if home_goals > away_goals:
        return 'home'
    if away_goals > home_goals:
        return 'away'
    return 'draw'


def match_points(home_goals: int, away_goals: int) -> Tuple[int, int]:
    """Return the (home, away) points awarded for a final score."""
    outcome = match_outcome(home_goals, away_goals)
    if outcome == 'home':
        return WIN_POINTS, LOSS_POINTS
    if outcome == 'away':
        return LOSS_POINTS, WIN_POINTS
    return DRAW_POINTS, DRAW_POINTS


def _empty_row(team: Team) -> Dict:
    return {
        'team_id': team.id,
        'team': team.name,
        'owner_name': team.owner_name,
        'played': 0,
        'wins': 0,
        'draws': 0,
        'losses': 0,
        'goals_for': 0,
        'goals_against': 0,
        'goal_diff': 0,
        'points': 0,
    }


def _record(row: Dict, scored: int, conceded: int, points: int):
    row['played'] += 1
    row['goals_for'] += scored
    row['goals_against'] += conceded
    row['points'] += points
    if scored > conceded:
        row['wins'] += 1
    elif scored < conceded:
        row['losses'] += 1
    else:
        row['draws'] += 1


def calculate_standings(teams: Iterable[Team], matches: Iterable[Match]) -> List[Dict]:
    """
    Calculate the standings table for one tournament.

    Only played matches between two of the given teams are counted, so rows
    never mix in results from another tournament.

    Returns: [{'team_id', 'team', 'owner_name', 'played', 'wins', 'draws',
               'losses', 'goals_for', 'goals_against', 'goal_diff', 'points'}, ...]

    Ranking: points -> goal difference -> goals for -> name -> id
    """
    table = {}
    for team in teams:
        table[team.id] = _empty_row(team)

    for match in matches:
        if not match.is_played:
            continue
        home = table.get(match.home_team_id)
        away = table.get(match.away_team_id)
        if home is None or away is None:
            continue
        home_points, away_points = match_points(match.home_goals, match.away_goals)
        _record(home, match.home_goals, match.away_goals, home_points)
        _record(away, match.away_goals, match.home_goals, away_points)

    for row in table.values():
        row['goal_diff'] = row['goals_for'] - row['goals_against']

    return sorted(
        table.values(),
        key=lambda x: (-x['points'], -x['goal_diff'], -x['goals_for'], x['team'], x['team_id'])
    )
