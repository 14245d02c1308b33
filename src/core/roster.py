"""
Team roster export and import in YAML.

Export format::

    tournament: Liga A
    teams:
      - name: Lions
        owner_name: Ana
        age: 24
      - Tigers

Import accepts the same document or a bare list of entries; each entry is a
team name or a mapping with ``name`` and optional ``owner_name``, ``age``,
``location`` and ``contact``.
"""
import re
import unicodedata

import yaml

TEAM_FIELDS = ('owner_name', 'age', 'location', 'contact')
MAX_NAME_LENGTH = 100
MAX_CONTACT_LENGTH = 150
# Largest value an INTEGER column accepts
MAX_INTEGER = 2**31 - 1


class RosterError(ValueError):
    pass


def slugify(name: str) -> str:
    """Filename-safe slug of a tournament name; accents fold to ASCII ('Año' -> 'ano')."""
    folded = unicodedata.normalize('NFKD', name).encode('ascii', 'ignore').decode('ascii')
    words = re.findall(r'[a-z0-9]+', folded.lower())
    return '-'.join(words) or 'tournament'


def teams_to_yaml(tournament, teams) -> str:
    """Serialize a tournament's teams; teams without details export as plain names."""
    entries = []
    for team in teams:
        details = {field: getattr(team, field) for field in TEAM_FIELDS
                   if getattr(team, field) not in (None, '')}
        if details:
            entries.append({'name': team.name, **details})
        else:
            entries.append(team.name)
    return yaml.dump({'tournament': tournament.name, 'teams': entries},
                     default_flow_style=False, allow_unicode=True, sort_keys=False)


def _parse_age(value, team_name):
    if value in (None, ''):
        return None
    try:
        age = int(value)
    except (TypeError, ValueError):
        raise RosterError(f'Invalid age for team "{team_name}": {value!r}')
    if age < 0 or age > MAX_INTEGER:
        raise RosterError(f'Invalid age for team "{team_name}": {value!r}')
    return age


def _clean_text(value, label, team_name, max_length=MAX_NAME_LENGTH):
    if value is None:
        return None
    value = str(value).strip()
    if len(value) > max_length:
        raise RosterError(f'{label} too long for team "{team_name}" (at most {max_length} characters)')
    return value or None


def parse_teams_yaml(content: str) -> list:
    """Parse an uploaded roster into a list of team dicts.

    Raises RosterError for malformed documents or entries.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise RosterError(f'Invalid YAML file: {e}')

    if isinstance(data, dict):
        data = data.get('teams')
    if not isinstance(data, list):
        raise RosterError('Invalid roster format. Expected a list of teams.')

    teams = []
    for item in data:
        if isinstance(item, (str, int)):
            name = str(item).strip()
            details = {}
        elif isinstance(item, dict):
            name = str(item.get('name') or '').strip()
            details = item
        else:
            raise RosterError(f'Invalid team entry: {item!r}')
        if not name:
            continue
        if len(name) > MAX_NAME_LENGTH:
            raise RosterError(f'Team name too long: "{name[:20]}..."')
        teams.append({
            'name': name,
            'owner_name': _clean_text(details.get('owner_name'), 'Owner', name),
            'age': _parse_age(details.get('age'), name),
            'location': _clean_text(details.get('location'), 'Location', name),
            'contact': _clean_text(details.get('contact'), 'Contact', name, MAX_CONTACT_LENGTH),
        })
    return teams
