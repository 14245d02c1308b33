MATCH_SCHEDULED = 'scheduled'
MATCH_PLAYED = 'played'


class Tournament:
    def __init__(self, id, name, visible=False, rules=None, created_at=None):
        self.id = id
        self.name = name
        self.visible = bool(visible)
        self.rules = rules
        self.created_at = created_at

    @classmethod
    def from_row(cls, row):
        data = row._mapping
        return cls(id=data['id'], name=data['name'], visible=data.get('visible', False),
                   rules=data.get('rules'), created_at=data.get('created_at'))

    def __repr__(self):
        return f"Tournament(id={self.id}, name={self.name}, visible={self.visible})"


class Team:
    def __init__(self, id, name, tournament_id, owner_name=None, age=None, location=None, contact=None):
        self.id = id
        self.name = name
        self.tournament_id = tournament_id
        self.owner_name = owner_name
        self.age = age
        self.location = location
        self.contact = contact

    @classmethod
    def from_row(cls, row):
        data = row._mapping
        return cls(id=data['id'], name=data['name'], tournament_id=data['tournament_id'],
                   owner_name=data.get('owner_name'), age=data.get('age'),
                   location=data.get('location'), contact=data.get('contact'))

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, tournament_id={self.tournament_id})"


class Match:
    def __init__(self, id, tournament_id, home_team_id, away_team_id, match_date,
                 status=MATCH_SCHEDULED, home_goals=None, away_goals=None,
                 home_name=None, away_name=None, tournament_name=None):
        self.id = id
        self.tournament_id = tournament_id
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self.match_date = match_date
        self.status = status
        self.home_goals = home_goals
        self.away_goals = away_goals
        # Joined display names, present when loaded with team/tournament joins
        self.home_name = home_name
        self.away_name = away_name
        self.tournament_name = tournament_name

    @property
    def is_played(self) -> bool:
        return self.status == MATCH_PLAYED and self.home_goals is not None and self.away_goals is not None

    @classmethod
    def from_row(cls, row):
        data = row._mapping
        return cls(id=data['id'], tournament_id=data['tournament_id'],
                   home_team_id=data['home_team_id'], away_team_id=data['away_team_id'],
                   match_date=data['match_date'], status=data['status'],
                   home_goals=data.get('home_goals'), away_goals=data.get('away_goals'),
                   home_name=data.get('home_name'), away_name=data.get('away_name'),
                   tournament_name=data.get('tournament_name'))

    def __repr__(self):
        score = f"{self.home_goals}-{self.away_goals}" if self.is_played else self.status
        return f"Match(id={self.id}, home={self.home_team_id}, away={self.away_team_id}, {score})"


class Admin:
    def __init__(self, id, username, password_hash):
        self.id = id
        self.username = username
        self.password_hash = password_hash

    @classmethod
    def from_row(cls, row):
        data = row._mapping
        return cls(id=data['id'], username=data['username'], password_hash=data['password_hash'])

    def __repr__(self):
        return f"Admin(id={self.id}, username={self.username})"
