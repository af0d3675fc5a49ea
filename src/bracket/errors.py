"""
Exceptions raised by the bracket core.
"""


class BracketError(Exception):
    """Base class for every recoverable bracket error."""


class InsufficientTeams(BracketError):
    """Raised when a bracket is built with fewer than two teams."""

    def __init__(self, num_teams):
        self.num_teams = num_teams
        super().__init__(f"At least 2 teams are needed to build a bracket (got {num_teams}).")


class DuplicateTeam(BracketError):
    """Raised when a team name is already in the tournament."""

    def __init__(self, name):
        self.name = name
        super().__init__(f'Team "{name}" already exists.')


class BlankTeamName(BracketError):
    def __init__(self):
        super().__init__("Team name must not be empty.")


class BlankTournamentName(BracketError):
    def __init__(self):
        super().__init__("Tournament name must not be empty.")


class TournamentNotFound(BracketError):
    def __init__(self, tournament_id):
        self.tournament_id = tournament_id
        if tournament_id is None:
            super().__init__("No active tournament.")
        else:
            super().__init__(f'Tournament "{tournament_id}" not found.')


class MatchNotFound(BracketError):
    def __init__(self, match_id):
        self.match_id = match_id
        super().__init__(f'Match "{match_id}" not found.')


class InvalidSetting(BracketError):
    """Raised for an unknown format, seeding mode or score side."""

    def __init__(self, setting, value, allowed):
        self.setting = setting
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(f"Invalid {setting} {value!r}; expected one of {', '.join(self.allowed)}.")


class RoundNotFound(BracketError):
    def __init__(self, round_idx):
        self.round_idx = round_idx
        super().__init__(f"Round {round_idx} does not exist.")
