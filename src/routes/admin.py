"""
Admin pages: login, dashboard and CRUD for tournaments, teams and matches.

Every view except login/logout sits behind ``auth.require_admin``. Business
rule violations raise ``ValidationError`` and are turned into a flashed
message plus a redirect back to the form by the app's error handlers.
"""
from datetime import datetime

from flask import Blueprint, Response, abort, current_app, flash, redirect, render_template, request, session, url_for

from app import get_db
from auth import authenticate_admin, current_admin_id, login_admin, require_admin
from core.roster import (MAX_CONTACT_LENGTH, MAX_INTEGER, MAX_NAME_LENGTH, RosterError, parse_teams_yaml,
                         slugify, teams_to_yaml)
from errors import DuplicateNameError, InvalidMatchError, ValidationError
from storage import matches as matches_sql
from storage import teams as teams_sql
from storage import tournaments as tournaments_sql

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')
admin_bp.before_request(require_admin)


def _select_tournament(tournaments, raw):
    """Pick the tournament whose id is *raw*, defaulting to the first one."""
    raw = str(raw or '').strip()
    if raw.isdecimal():
        wanted = int(raw)
        for t in tournaments:
            if t.id == wanted:
                return t
    return tournaments[0] if tournaments else None


def _require_text(value, label, redirect_to, max_length=MAX_NAME_LENGTH):
    value = (value or '').strip()
    if not value:
        raise ValidationError(f'{label} is required.', redirect_to)
    if len(value) > max_length:
        raise ValidationError(f'{label} must be at most {max_length} characters.', redirect_to)
    return value


def _optional_text(value, label, redirect_to, max_length=MAX_NAME_LENGTH):
    value = (value or '').strip()
    if len(value) > max_length:
        raise ValidationError(f'{label} must be at most {max_length} characters.', redirect_to)
    return value or None


def _parse_int(value, label, redirect_to, required=True, minimum=None, maximum=MAX_INTEGER):
    value = (value or '').strip()
    if not value:
        if required:
            raise ValidationError(f'{label} is required.', redirect_to)
        return None
    try:
        number = int(value)
    except ValueError:
        raise ValidationError(f'{label} must be a whole number.', redirect_to)
    if minimum is not None and number < minimum:
        raise ValidationError(f'{label} must be at least {minimum}.', redirect_to)
    if number > maximum:
        raise ValidationError(f'{label} must be at most {maximum}.', redirect_to)
    return number


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

@admin_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Login form and authentication."""
    if current_admin_id() is not None:
        return redirect(url_for('admin.dashboard'))
    if request.method == 'POST':
        username = request.form.get('username', '')
        password = request.form.get('password', '')
        with get_db().connect() as conn:
            admin = authenticate_admin(conn, username, password)
        if admin is not None:
            login_admin(admin)
            current_app.logger.info(f'Admin {admin.username} logged in')
            return redirect(url_for('admin.dashboard'))
        current_app.logger.warning(f'Failed admin login from {request.remote_addr}')
        flash('Invalid username or password.', 'error')
    return render_template('admin/login.html')


@admin_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    """Clear session and return to the public site."""
    session.clear()
    flash('Logged out.', 'success')
    return redirect(url_for('public.home'))


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

@admin_bp.route('/')
@admin_bp.route('/dashboard')
def dashboard():
    """Overview with team and match counts for the selected tournament."""
    teams_count = 0
    match_counts = {'total': 0, 'played': 0, 'scheduled': 0}
    with get_db().connect() as conn:
        tournaments = tournaments_sql.list_tournaments(conn)
        current = _select_tournament(tournaments, request.args.get('tournament'))
        if current:
            teams_count = teams_sql.count_teams(conn, current.id)
            match_counts = matches_sql.count_matches(conn, current.id)
    return render_template('admin/dashboard.html', tournaments=tournaments, current=current,
                           teams_count=teams_count, match_counts=match_counts)


# ---------------------------------------------------------------------------
# Tournaments
# ---------------------------------------------------------------------------

@admin_bp.route('/tournaments', methods=['GET', 'POST'])
def tournaments():
    """List tournaments (newest first) and create new ones."""
    if request.method == 'POST':
        back = url_for('admin.tournaments')
        name = _require_text(request.form.get('name'), 'Tournament name', back)
        with get_db().connect() as conn:
            try:
                tournaments_sql.create_tournament(conn, name)
            except DuplicateNameError as e:
                e.redirect_to = back
                raise
        current_app.logger.info(f'Tournament "{name}" created')
        flash(f'Tournament "{name}" created.', 'success')
        return redirect(back)

    with get_db().connect() as conn:
        items = tournaments_sql.list_tournaments(conn, order_by='created')
    return render_template('admin/tournaments.html', tournaments=items)


@admin_bp.route('/tournaments/<int:tournament_id>/toggle', methods=['POST'])
def toggle_tournament(tournament_id):
    """Show or hide a tournament on the public site."""
    with get_db().connect() as conn:
        if not tournaments_sql.toggle_visibility(conn, tournament_id):
            abort(404, description='Tournament not found.')
    return redirect(url_for('admin.tournaments'))


@admin_bp.route('/tournaments/<int:tournament_id>/delete', methods=['POST'])
def delete_tournament(tournament_id):
    """Delete a tournament with all its teams and matches."""
    with get_db().connect() as conn:
        if not tournaments_sql.delete_tournament(conn, tournament_id):
            abort(404, description='Tournament not found.')
    current_app.logger.info(f'Tournament {tournament_id} deleted')
    flash('Tournament deleted.', 'success')
    return redirect(url_for('admin.tournaments'))


@admin_bp.route('/tournaments/<int:tournament_id>/rules', methods=['GET', 'POST'])
def edit_rules(tournament_id):
    with get_db().connect() as conn:
        tournament = tournaments_sql.get_tournament(conn, tournament_id)
        if tournament is None:
            abort(404, description='Tournament not found.')
        if request.method == 'POST':
            tournaments_sql.update_rules(conn, tournament_id, request.form.get('rules', ''))
    if request.method == 'POST':
        flash(f'Rules for "{tournament.name}" saved.', 'success')
        return redirect(url_for('admin.tournaments'))
    return render_template('admin/edit_rules.html', tournament=tournament)


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------

@admin_bp.route('/teams', methods=['GET', 'POST'])
def teams():
    """Teams of the selected tournament, and the add-team form."""
    if request.method == 'POST':
        return _create_team()

    with get_db().connect() as conn:
        tournaments = tournaments_sql.list_tournaments(conn)
        current = _select_tournament(tournaments, request.args.get('tournament'))
        items = teams_sql.list_teams(conn, current.id) if current else []
    return render_template('admin/teams.html', teams=items, tournaments=tournaments, current=current)


def _create_team():
    form = request.form
    tournament_id = _parse_int(form.get('tournament_id'), 'Tournament', url_for('admin.teams'))
    back = url_for('admin.teams', tournament=tournament_id)
    name = _require_text(form.get('name'), 'Team name', back)
    age = _parse_int(form.get('age'), 'Age', back, required=False, minimum=0)
    owner_name = _optional_text(form.get('owner_name'), 'Owner', back)
    location = _optional_text(form.get('location'), 'Location', back)
    contact = _optional_text(form.get('contact'), 'Contact', back, max_length=MAX_CONTACT_LENGTH)

    with get_db().connect() as conn:
        if tournaments_sql.get_tournament(conn, tournament_id) is None:
            raise ValidationError('Tournament not found.', url_for('admin.teams'))
        try:
            teams_sql.create_team(conn, tournament_id, name, owner_name=owner_name, age=age,
                                  location=location, contact=contact)
        except DuplicateNameError as e:
            e.redirect_to = back
            raise
    flash(f'Team "{name}" added.', 'success')
    return redirect(back)


@admin_bp.route('/teams/<int:team_id>/delete', methods=['POST'])
def delete_team(team_id):
    """Delete a team and its matches."""
    with get_db().connect() as conn:
        team = teams_sql.get_team(conn, team_id)
        if team is None:
            abort(404, description='Team not found.')
        teams_sql.delete_team(conn, team_id)
    flash(f'Team "{team.name}" deleted.', 'success')
    return redirect(url_for('admin.teams', tournament=team.tournament_id))


@admin_bp.route('/teams/export')
def export_teams():
    """Download the selected tournament's teams in importable YAML format."""
    raw = request.args.get('tournament', '').strip()
    tournament_id = int(raw) if raw.isdecimal() else None
    if tournament_id is None or tournament_id > MAX_INTEGER:
        abort(404, description='Tournament not found.')
    with get_db().connect() as conn:
        tournament = tournaments_sql.get_tournament(conn, tournament_id)
        if tournament is None:
            abort(404, description='Tournament not found.')
        items = teams_sql.list_teams(conn, tournament.id)

    yaml_content = teams_to_yaml(tournament, items)
    return Response(
        yaml_content,
        mimetype='application/x-yaml',
        headers={'Content-Disposition': f'attachment; filename=teams_{slugify(tournament.name)}.yaml'}
    )


@admin_bp.route('/teams/import', methods=['POST'])
def import_teams():
    """Add teams from an uploaded YAML roster, skipping names already present."""
    tournament_id = _parse_int(request.form.get('tournament_id'), 'Tournament', url_for('admin.teams'))
    back = url_for('admin.teams', tournament=tournament_id)
    upload = request.files.get('yaml_file')
    if upload is None or not upload.filename:
        raise ValidationError('Choose a YAML file to import.', back)
    try:
        roster = parse_teams_yaml(upload.read().decode('utf-8'))
    except UnicodeDecodeError:
        raise ValidationError('The roster file must be UTF-8 text.', back)
    except RosterError as e:
        raise ValidationError(str(e), back)

    added = 0
    skipped = 0
    with get_db().connect() as conn:
        if tournaments_sql.get_tournament(conn, tournament_id) is None:
            raise ValidationError('Tournament not found.', url_for('admin.teams'))
        existing = teams_sql.team_names(conn, tournament_id)
        for entry in roster:
            if entry['name'] in existing:
                skipped += 1
                continue
            teams_sql.create_team(conn, tournament_id, entry['name'],
                                  owner_name=entry['owner_name'], age=entry['age'],
                                  location=entry['location'], contact=entry['contact'])
            existing.add(entry['name'])
            added += 1
    current_app.logger.info(f'Imported {added} teams into tournament {tournament_id} ({skipped} skipped)')
    flash(f'Imported {added} teams ({skipped} skipped as duplicates).', 'success')
    return redirect(back)


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------

@admin_bp.route('/matches', methods=['GET', 'POST'])
def matches():
    """Fixtures and results of the selected tournament, and the schedule form."""
    if request.method == 'POST':
        return _schedule_match()

    with get_db().connect() as conn:
        tournaments = tournaments_sql.list_tournaments(conn)
        current = _select_tournament(tournaments, request.args.get('tournament'))
        items = teams_sql.list_teams(conn, current.id) if current else []
        match_list = matches_sql.list_matches(conn, current.id) if current else []
    return render_template('admin/matches.html', teams=items, matches=match_list,
                           tournaments=tournaments, current=current)


def _schedule_match():
    form = request.form
    tournament_id = _parse_int(form.get('tournament_id'), 'Tournament', url_for('admin.matches'))
    back = url_for('admin.matches', tournament=tournament_id)
    home_team_id = _parse_int(form.get('home_team_id'), 'Home team', back)
    away_team_id = _parse_int(form.get('away_team_id'), 'Away team', back)
    raw_date = (form.get('match_date') or '').strip()
    try:
        match_date = datetime.strptime(raw_date, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError('Match date must be a valid date (YYYY-MM-DD).', back)
    if home_team_id == away_team_id:
        raise InvalidMatchError('The home and away teams must be different.', back)

    with get_db().connect() as conn:
        if matches_sql.count_tournament_teams(conn, tournament_id, [home_team_id, away_team_id]) != 2:
            raise InvalidMatchError('Both teams must belong to the selected tournament.', back)
        matches_sql.create_match(conn, tournament_id, home_team_id, away_team_id, match_date)
    flash('Match scheduled.', 'success')
    return redirect(back)


@admin_bp.route('/matches/<int:match_id>')
def edit_match(match_id):
    """Form to enter or correct a match result."""
    with get_db().connect() as conn:
        match = matches_sql.get_match(conn, match_id)
    if match is None:
        abort(404, description='Match not found.')
    return render_template('admin/edit_match.html', match=match)


@admin_bp.route('/matches/<int:match_id>/result', methods=['POST'])
def record_result(match_id):
    back = url_for('admin.edit_match', match_id=match_id)
    home_goals = _parse_int(request.form.get('home_goals'), 'Home goals', back, minimum=0)
    away_goals = _parse_int(request.form.get('away_goals'), 'Away goals', back, minimum=0)
    with get_db().connect() as conn:
        match = matches_sql.get_match(conn, match_id)
        if match is None:
            abort(404, description='Match not found.')
        matches_sql.record_result(conn, match_id, home_goals, away_goals)
    flash(f'Result saved: {match.home_name} {home_goals} - {away_goals} {match.away_name}.', 'success')
    return redirect(url_for('admin.matches', tournament=match.tournament_id))


@admin_bp.route('/matches/<int:match_id>/undo', methods=['POST'])
def undo_result(match_id):
    """Clear a recorded result, returning the match to the fixture list."""
    with get_db().connect() as conn:
        match = matches_sql.get_match(conn, match_id)
        if match is None:
            abort(404, description='Match not found.')
        matches_sql.undo_result(conn, match_id)
    flash('Result cleared.', 'success')
    return redirect(url_for('admin.matches', tournament=match.tournament_id))
