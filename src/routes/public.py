"""
Public pages. Every query here is filtered to visible tournaments.
"""
from flask import Blueprint, abort, render_template, request

from app import get_db
from core.models import MATCH_PLAYED, MATCH_SCHEDULED
from core.standings import calculate_standings
from storage import matches as matches_sql
from storage import teams as teams_sql
from storage import tournaments as tournaments_sql

public_bp = Blueprint('public', __name__)


def _selected_tournament(visible_tournaments):
    """The visible tournament named by ?tournament=<id>, or None."""
    raw = request.args.get('tournament', '').strip()
    if not raw.isdecimal():
        return None
    wanted = int(raw)
    return next((t for t in visible_tournaments if t.id == wanted), None)


@public_bp.route('/')
@public_bp.route('/inicio')
def home():
    """Landing page listing visible tournaments."""
    with get_db().connect() as conn:
        tournaments = tournaments_sql.list_visible_tournaments(conn)
    return render_template('public/home.html', tournaments=tournaments)


@public_bp.route('/table')
def table():
    """Standings for the selected tournament."""
    standings = []
    with get_db().connect() as conn:
        visible = tournaments_sql.list_visible_tournaments(conn)
        selected = _selected_tournament(visible)
        if selected:
            teams = teams_sql.list_teams(conn, selected.id)
            played = matches_sql.list_played_matches(conn, selected.id)
            standings = calculate_standings(teams, played)
    return render_template('public/table.html', standings=standings,
                           visible_tournaments=visible, selected=selected)


def _match_listing(status, template):
    with get_db().connect() as conn:
        visible = tournaments_sql.list_visible_tournaments(conn)
        selected = _selected_tournament(visible)
        tournament_ids = [selected.id] if selected else [t.id for t in visible]
        matches = matches_sql.list_public_matches(conn, status, tournament_ids)
    return render_template(template, matches=matches, visible_tournaments=visible, selected=selected)


@public_bp.route('/results')
def results():
    """Played matches, newest first; all visible tournaments unless one is selected."""
    return _match_listing(MATCH_PLAYED, 'public/results.html')


@public_bp.route('/fixtures')
def fixtures():
    """Scheduled matches, soonest first."""
    return _match_listing(MATCH_SCHEDULED, 'public/fixtures.html')


@public_bp.route('/rules')
def rules():
    with get_db().connect() as conn:
        visible = tournaments_sql.list_visible_tournaments(conn)
    selected = _selected_tournament(visible)
    return render_template('public/rules.html', visible_tournaments=visible, selected=selected,
                           rules=(selected.rules or '') if selected else '')


@public_bp.route('/tournament-teams')
def tournament_teams():
    teams = []
    with get_db().connect() as conn:
        visible = tournaments_sql.list_visible_tournaments(conn)
        selected = _selected_tournament(visible)
        if selected:
            teams = teams_sql.list_teams(conn, selected.id)
    return render_template('public/tournament_teams.html', teams=teams,
                           visible_tournaments=visible, selected=selected)


@public_bp.route('/team/<int:team_id>')
def team_profile(team_id):
    """Team details and its matches; hidden tournaments' teams are not found."""
    with get_db().connect() as conn:
        team = teams_sql.get_public_team(conn, team_id)
        if team is None:
            abort(404, description='Team not found.')
        tournament = tournaments_sql.get_tournament(conn, team.tournament_id)
        matches = matches_sql.list_team_matches(conn, team_id)
    return render_template('public/team_profile.html', team=team, tournament=tournament, matches=matches)
