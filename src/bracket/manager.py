"""
Tournament management: the tournament registry, the team-list editor and
the operations that drive the bracket (build, record score, queries).

Every mutating call hands the whole TournamentData to the save callback
afterwards. Saving is best effort; a failing callback is logged, never raised.
"""
import logging
import re
from typing import Callable, Dict, Optional

from .elimination import (
    build_rounds,
    get_bracket_display,
    get_placements,
    get_round_name,
    parse_score,
    propagate_winners,
)
from .errors import (
    BlankTeamName,
    BlankTournamentName,
    DuplicateTeam,
    InvalidSetting,
    MatchNotFound,
    RoundNotFound,
    TournamentNotFound,
)
from .models import FORMATS, SEEDINGS, Tournament, TournamentData

logger = logging.getLogger(__name__)

SIDES = ('A', 'B')


def _slugify(name: str) -> str:
    """Convert tournament name to an identifier-safe slug."""
    slug = name.lower().strip()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'[\s-]+', '-', slug)
    slug = slug.strip('-')
    return slug or 'tournament'


def _clean_team_name(name) -> str:
    name = (name or '').strip()
    if not name:
        raise BlankTeamName()
    return name


class TournamentManager:
    def __init__(self, tournament_data: Optional[TournamentData] = None,
                 save_callback: Optional[Callable[[TournamentData], None]] = None):
        self.tournament_data = tournament_data if tournament_data else TournamentData()
        self.save_callback = save_callback

    def set_save_callback(self, callback: Optional[Callable[[TournamentData], None]]):
        self.save_callback = callback

    def save_data(self):
        if self.save_callback is None:
            return
        try:
            self.save_callback(self.tournament_data)
        except Exception as e:
            logger.warning(f'Failed to save tournament data: {e}')

    @property
    def tournaments(self):
        return self.tournament_data.tournaments

    def get_tournament(self, tournament_id=None) -> Tournament:
        """Return the given tournament, or the active one when no id is given."""
        if tournament_id is None:
            tournament_id = self.tournament_data.active_tournament_id
        tournament = self.tournament_data.get(tournament_id) if tournament_id else None
        if tournament is None:
            raise TournamentNotFound(tournament_id)
        return tournament

    def _unique_id(self, name: str) -> str:
        base = _slugify(name)
        existing = {t.id for t in self.tournaments}
        candidate = base
        suffix = 2
        while candidate in existing:
            candidate = f'{base}-{suffix}'
            suffix += 1
        return candidate

    def create_tournament(self, name: str) -> Tournament:
        name = (name or '').strip()
        if not name:
            raise BlankTournamentName()
        tournament = Tournament(id=self._unique_id(name), name=name)
        self.tournaments.insert(0, tournament)
        self.tournament_data.active_tournament_id = tournament.id
        logger.debug(f'Created tournament {tournament.id}')
        self.save_data()
        return tournament

    def select_tournament(self, tournament_id) -> Tournament:
        tournament = self.get_tournament(tournament_id)
        self.tournament_data.active_tournament_id = tournament.id
        self.save_data()
        return tournament

    def delete_tournament(self, tournament_id):
        tournament = self.get_tournament(tournament_id)
        self.tournament_data.tournaments = [t for t in self.tournaments if t.id != tournament.id]
        if self.tournament_data.active_tournament_id == tournament.id:
            self.tournament_data.active_tournament_id = None
        logger.debug(f'Deleted tournament {tournament.id}')
        self.save_data()

    def update_settings(self, tournament_id=None, name=None, sport=None, format=None, seeding=None) -> Tournament:
        """Change name, sport, format or seeding. The bracket is left as it is."""
        tournament = self.get_tournament(tournament_id)
        if name is not None and not name.strip():
            raise BlankTournamentName()
        if format is not None and format not in FORMATS:
            raise InvalidSetting('format', format, FORMATS)
        if seeding is not None and seeding not in SEEDINGS:
            raise InvalidSetting('seeding', seeding, SEEDINGS)

        if name is not None:
            tournament.name = name.strip()
        if sport is not None:
            tournament.sport = sport.strip()
        if format is not None:
            tournament.format = format
        if seeding is not None:
            tournament.seeding = seeding
        self.save_data()
        return tournament

    def add_team(self, name, tournament_id=None) -> str:
        tournament = self.get_tournament(tournament_id)
        name = _clean_team_name(name)
        if name in tournament.teams:
            raise DuplicateTeam(name)
        tournament.teams.append(name)
        self.save_data()
        return name

    def remove_team(self, name, tournament_id=None):
        tournament = self.get_tournament(tournament_id)
        if name not in tournament.teams:
            return
        tournament.teams = [team for team in tournament.teams if team != name]
        self._refresh_bracket(tournament)
        self.save_data()

    def rename_team(self, old_name, new_name, tournament_id=None) -> str:
        """Rename a team everywhere it appears. Pairings and scores are kept."""
        tournament = self.get_tournament(tournament_id)
        new_name = _clean_team_name(new_name)
        if old_name not in tournament.teams or old_name == new_name:
            return new_name
        if new_name in tournament.teams:
            raise DuplicateTeam(new_name)
        tournament.teams[tournament.teams.index(old_name)] = new_name
        for match in tournament.iter_matches():
            match.rename(old_name, new_name)
        self.save_data()
        return new_name

    def _refresh_bracket(self, tournament: Tournament):
        # Rebuilt without the removed team, dropped once fewer than two teams remain
        if not tournament.has_bracket:
            return
        if len(tournament.teams) < 2:
            tournament.rounds = []
        else:
            tournament.rounds = self._build(tournament)

    def _build(self, tournament: Tournament, rng=None):
        if tournament.format == 'double':
            logger.warning(f'Tournament {tournament.id}: double elimination builds the winners bracket only')
        return build_rounds(tournament.teams, tournament.seeding, rng)

    def build_bracket(self, tournament_id=None, rng=None) -> Tournament:
        """Rebuild all rounds from the team list. Previously entered scores are discarded."""
        tournament = self.get_tournament(tournament_id)
        # build_rounds raises before anything is assigned, so a refused build keeps the old rounds
        tournament.rounds = self._build(tournament, rng)
        logger.debug(f'Built bracket for {tournament.id}: {len(tournament.teams)} teams, {len(tournament.rounds)} rounds')
        self.save_data()
        return tournament

    def record_score(self, match_id, side, value, tournament_id=None):
        tournament = self.get_tournament(tournament_id)
        if side not in SIDES:
            raise InvalidSetting('side', side, SIDES)
        match = tournament.find_match(match_id)
        if match is None:
            raise MatchNotFound(match_id)

        score = parse_score(value)
        match.set_score(side, score)
        propagate_winners(tournament.rounds)
        logger.debug(f'Recorded {match_id} side {side} = {score}')
        self.save_data()
        return match

    def get_round_label(self, round_idx: int, tournament_id=None) -> str:
        tournament = self.get_tournament(tournament_id)
        if not 0 <= round_idx < len(tournament.rounds):
            raise RoundNotFound(round_idx)
        return get_round_name(round_idx, len(tournament.rounds), len(tournament.rounds[round_idx]))

    def get_placements(self, tournament_id=None) -> Dict[str, Optional[str]]:
        return get_placements(self.get_tournament(tournament_id).rounds)

    def get_bracket_display(self, tournament_id=None) -> Dict:
        return get_bracket_display(self.get_tournament(tournament_id))

