from sqlalchemy import Date, bindparam, text

from core.models import MATCH_PLAYED, MATCH_SCHEDULED, Match

# Every match read joins the display names so templates never issue extra queries
MATCH_SELECT = """
    SELECT m.id, m.tournament_id, m.home_team_id, m.away_team_id,
           m.home_goals, m.away_goals, m.match_date, m.status,
           home_t.name AS home_name, away_t.name AS away_name, tr.name AS tournament_name
    FROM matches m
    JOIN teams home_t ON m.home_team_id = home_t.id
    JOIN teams away_t ON m.away_team_id = away_t.id
    JOIN tournaments tr ON m.tournament_id = tr.id
    """


def _match_query(where, order="m.match_date DESC, m.id DESC", *binds):
    sql = f"{MATCH_SELECT} WHERE {where} ORDER BY {order}"
    return text(sql).bindparams(*binds).columns(match_date=Date)


def get_match(conn, match_id):
    query = _match_query("m.id = :match_id")
    row = conn.execute(query, {"match_id": match_id}).first()
    return Match.from_row(row) if row is not None else None


def list_matches(conn, tournament_id):
    query = _match_query("m.tournament_id = :tournament_id")
    return [Match.from_row(row) for row in conn.execute(query, {"tournament_id": tournament_id})]


def list_played_matches(conn, tournament_id):
    query = _match_query("m.tournament_id = :tournament_id AND m.status = :status")
    result = conn.execute(query, {"tournament_id": tournament_id, "status": MATCH_PLAYED})
    return [Match.from_row(row) for row in result]


def list_public_matches(conn, status, tournament_ids):
    """Matches with *status* across the given (visible) tournaments.

    Results come newest first, fixtures soonest first.
    """
    if not tournament_ids:
        return []
    order = "m.match_date ASC, m.id ASC" if status == MATCH_SCHEDULED else "m.match_date DESC, m.id DESC"
    query = _match_query("m.status = :status AND m.tournament_id IN :tournament_ids", order,
                         bindparam("tournament_ids", expanding=True))
    result = conn.execute(query, {"status": status, "tournament_ids": list(tournament_ids)})
    return [Match.from_row(row) for row in result]


def list_team_matches(conn, team_id):
    query = _match_query("(m.home_team_id = :team_id OR m.away_team_id = :team_id)", "m.match_date ASC, m.id ASC")
    return [Match.from_row(row) for row in conn.execute(query, {"team_id": team_id})]


def count_matches(conn, tournament_id) -> dict:
    """Return {'total': n, 'played': n, 'scheduled': n} for a tournament."""
    query = text("""
        SELECT status, COUNT(*) AS n
        FROM matches
        WHERE tournament_id = :tournament_id
        GROUP BY status
        """)
    counts = {MATCH_PLAYED: 0, MATCH_SCHEDULED: 0}
    for row in conn.execute(query, {"tournament_id": tournament_id}):
        counts[row.status] = row.n
    counts['total'] = counts[MATCH_PLAYED] + counts[MATCH_SCHEDULED]
    return counts


def count_tournament_teams(conn, tournament_id, team_ids) -> int:
    """How many of *team_ids* belong to the tournament."""
    query = text("""
        SELECT COUNT(*)
        FROM teams
        WHERE tournament_id = :tournament_id AND id IN :team_ids
        """).bindparams(bindparam("team_ids", expanding=True))
    return conn.execute(query, {"tournament_id": tournament_id, "team_ids": list(team_ids)}).scalar_one()


def create_match(conn, tournament_id, home_team_id, away_team_id, match_date):
    query = text("""
        INSERT INTO matches (tournament_id, home_team_id, away_team_id, match_date, status)
        VALUES (:tournament_id, :home_team_id, :away_team_id, :match_date, :status)
        RETURNING id
        """).bindparams(bindparam("match_date", type_=Date))
    values = {
        "tournament_id": tournament_id,
        "home_team_id": home_team_id,
        "away_team_id": away_team_id,
        "match_date": match_date,
        "status": MATCH_SCHEDULED,
    }
    return conn.execute(query, values).scalar_one()


def record_result(conn, match_id, home_goals, away_goals) -> bool:
    query = text("""
        UPDATE matches
        SET home_goals = :home_goals, away_goals = :away_goals, status = :status
        WHERE id = :match_id
        """)
    values = {"home_goals": home_goals, "away_goals": away_goals, "status": MATCH_PLAYED, "match_id": match_id}
    return conn.execute(query, values).rowcount > 0


def undo_result(conn, match_id) -> bool:
    """Put a played match back on the fixture list."""
    query = text("""
        UPDATE matches
        SET home_goals = NULL, away_goals = NULL, status = :status
        WHERE id = :match_id
        """)
    return conn.execute(query, {"status": MATCH_SCHEDULED, "match_id": match_id}).rowcount > 0
