"""
Data model for tournaments, their rounds and matches.

Rounds are stored flat: each match points at the match it feeds through
``parent_id``, so a tournament serializes to plain dicts and lists.
"""
from typing import Dict, Iterator, List, Optional

FORMATS = ('single', 'double')
SEEDINGS = ('input', 'random')

_MATCH_FIELDS = ('id', 'round_idx', 'slot_idx', 'team_a', 'team_b', 'score_a', 'score_b',
                 'winner', 'parent_id', 'is_bye', 'match_number', 'scored_teams')


class Match:
    def __init__(self, id, round_idx, slot_idx, team_a=None, team_b=None, score_a=None,
                 score_b=None, winner=None, parent_id=None, is_bye=False, match_number=None, scored_teams=None):
        self.id = id
        self.round_idx = round_idx
        self.slot_idx = slot_idx
        self.team_a = team_a
        self.team_b = team_b
        self.score_a = score_a
        self.score_b = score_b
        self.winner = winner
        self.parent_id = parent_id  # None only for the final
        self.is_bye = is_bye
        self.match_number = match_number
        # Pairing the scores were entered against; None accepts any pairing
        self.scored_teams = list(scored_teams) if scored_teams else None

    @property
    def loser(self) -> Optional[str]:
        if self.winner is None or self.is_bye:
            return None
        return self.team_b if self.winner == self.team_a else self.team_a

    @property
    def pairing(self) -> List[Optional[str]]:
        return [self.team_a, self.team_b]

    @property
    def scores_match_pairing(self) -> bool:
        return self.scored_teams is None or self.scored_teams == self.pairing

    def set_score(self, side: str, score):
        """
        Set one side's score against the teams currently on the match.

        A score left over from a different pairing is dropped, so both
        scores always belong to the same two teams.
        """
        if not self.scores_match_pairing:
            self.score_a = None
            self.score_b = None
        if side == 'A':
            self.score_a = score
        else:
            self.score_b = score
        self.scored_teams = self.pairing

    def rename(self, old_name: str, new_name: str):
        if self.team_a == old_name:
            self.team_a = new_name
        if self.team_b == old_name:
            self.team_b = new_name
        if self.winner == old_name:
            self.winner = new_name
        if self.scored_teams:
            self.scored_teams = [new_name if team == old_name else team for team in self.scored_teams]

    def to_dict(self) -> Dict:
        return {field: getattr(self, field) for field in _MATCH_FIELDS}

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        return cls(**{field: data.get(field) for field in _MATCH_FIELDS if field in data})

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Match(id={self.id}, team_a={self.team_a}, team_b={self.team_b}, "
                f"score={self.score_a}-{self.score_b}, winner={self.winner})")


class Tournament:
    def __init__(self, id, name, teams=None, rounds=None, sport='', format='single', seeding='input'):
        self.id = id
        self.name = name
        self.teams = list(teams) if teams else []
        self.rounds = rounds if rounds else []
        self.sport = sport
        self.format = format
        self.seeding = seeding

    @property
    def has_bracket(self) -> bool:
        return bool(self.rounds)

    @property
    def final_match(self) -> Optional[Match]:
        if not self.rounds or not self.rounds[-1]:
            return None
        return self.rounds[-1][0]

    def iter_matches(self) -> Iterator[Match]:
        for round_matches in self.rounds:
            yield from round_matches

    def find_match(self, match_id) -> Optional[Match]:
        for match in self.iter_matches():
            if match.id == match_id:
                return match
        return None

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'teams': list(self.teams),
            'rounds': [[match.to_dict() for match in round_matches] for round_matches in self.rounds],
            'sport': self.sport,
            'format': self.format,
            'seeding': self.seeding,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Tournament':
        rounds = [[Match.from_dict(m) for m in round_matches] for round_matches in data.get('rounds') or []]
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            teams=data.get('teams') or [],
            rounds=rounds,
            sport=data.get('sport') or '',
            format=data.get('format', 'single'),
            seeding=data.get('seeding', 'input'),
        )

    def __repr__(self):
        return f"Tournament(id={self.id}, name={self.name}, teams={self.teams}, rounds={len(self.rounds)})"


class TournamentData:
    """All tournaments of one workspace plus the currently selected one."""

    def __init__(self, tournaments: Optional[List[Tournament]] = None, active_tournament_id=None):
        self.tournaments = tournaments if tournaments else []
        self.active_tournament_id = active_tournament_id

    def get(self, tournament_id) -> Optional[Tournament]:
        for tournament in self.tournaments:
            if tournament.id == tournament_id:
                return tournament
        return None

    def to_dict(self) -> Dict:
        return {
            'active': self.active_tournament_id,
            'tournaments': [t.to_dict() for t in self.tournaments],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'TournamentData':
        if not data:
            return cls()
        tournaments = [Tournament.from_dict(t) for t in data.get('tournaments') or []]
        return cls(tournaments=tournaments, active_tournament_id=data.get('active'))

    def __repr__(self):
        return f"TournamentData(active={self.active_tournament_id}, tournaments={len(self.tournaments)})"
