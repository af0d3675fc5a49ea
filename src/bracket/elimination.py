"""
Single elimination bracket construction, result propagation and labelling.
"""
import math
import random
from typing import Dict, List, Optional

from .errors import InsufficientTeams, InvalidSetting
from .models import SEEDINGS, Match


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    bracket_size = calculate_bracket_size(num_teams)
    return bracket_size - num_teams


def _generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    This ensures that if all higher seeds win, they meet in the proper rounds.

    For 8 teams: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)
    """
    if bracket_size == 2:
        return [1, 2]

    # Recursive generation
    half_size = bracket_size // 2
    upper_half = _generate_bracket_order(half_size)
    lower_half = [bracket_size + 1 - seed for seed in upper_half]

    # Interleave: pair each upper seed with its complement
    result = []
    for u, l in zip(upper_half, lower_half):
        result.extend([u, l])
    return result


def _match_code(round_idx: int, slot_idx: int) -> str:
    return f"R{round_idx + 1}-M{slot_idx + 1}"


def seed_teams(teams: List[str], seeding: str = 'input', rng: Optional[random.Random] = None) -> List[str]:
    """Return the teams in seed order (index 0 = top seed)."""
    if seeding not in SEEDINGS:
        raise InvalidSetting('seeding', seeding, SEEDINGS)
    seeded = list(teams)
    if seeding == 'random':
        (rng or random).shuffle(seeded)
    return seeded


def place_teams(seeded: List[str], bracket_size: int) -> List[Optional[str]]:
    """
    Put seeded teams on the leaf slots of the bracket.

    Seeds beyond the team count are empty (None); the standard order pairs
    each of them with one of the top seeds, which then gets the bye.
    """
    seed_to_team = {seed: team for seed, team in enumerate(seeded, start=1)}
    return [seed_to_team.get(seed) for seed in _generate_bracket_order(bracket_size)]


def build_rounds(teams: List[str], seeding: str = 'input', rng: Optional[random.Random] = None) -> List[List[Match]]:
    """
    Build a fresh single elimination bracket.

    Round 0 holds bracket_size / 2 matches; every later round halves it down
    to the final. Byes are resolved and advanced before returning.
    """
    if len(teams) < 2:
        raise InsufficientTeams(len(teams))

    seeded = seed_teams(teams, seeding, rng)
    bracket_size = calculate_bracket_size(len(seeded))
    total_rounds = int(math.log2(bracket_size))
    slots = place_teams(seeded, bracket_size)

    rounds = []
    num_matches = bracket_size // 2
    for round_idx in range(total_rounds):
        round_matches = []
        for slot_idx in range(num_matches):
            match = Match(_match_code(round_idx, slot_idx), round_idx, slot_idx)
            if round_idx == 0:
                match.team_a = slots[slot_idx * 2]
                match.team_b = slots[slot_idx * 2 + 1]
                if (match.team_a is None) != (match.team_b is None):
                    match.is_bye = True
                    match.winner = match.team_a or match.team_b
            round_matches.append(match)
        rounds.append(round_matches)
        num_matches //= 2

    # Adjacent matches feed the same parent
    for round_idx in range(total_rounds - 1):
        next_round = rounds[round_idx + 1]
        for match in rounds[round_idx]:
            match.parent_id = next_round[match.slot_idx // 2].id

    propagate_winners(rounds)
    _assign_match_numbers(rounds)
    return rounds


def _assign_match_numbers(rounds: List[List[Match]]) -> None:
    """Number every match that will actually be played and whose teams are known."""
    match_number = 1
    for round_matches in rounds:
        for match in round_matches:
            if match.is_bye or match.team_a is None or match.team_b is None:
                match.match_number = None
                continue
            match.match_number = match_number
            match_number += 1


def determine_winner(match: Match) -> Optional[str]:
    """
    Winner of a played match, or None while it is unresolved: missing teams,
    missing scores, a tie, or scores entered against a different pairing.
    """
    if match.is_bye:
        return match.team_a or match.team_b
    if match.team_a is None or match.team_b is None:
        return None
    if match.score_a is None or match.score_b is None:
        return None
    if not match.scores_match_pairing:
        return None
    if match.score_a > match.score_b:
        return match.team_a
    if match.score_b > match.score_a:
        return match.team_b
    return None


def propagate_winners(rounds: List[List[Match]]) -> List[List[Match]]:
    """
    Recompute every winner from the scores, round 0 to the final.

    Sides of later rounds are only ever fed by their two children, so they
    are cleared first and re-filled from resolved children. A match whose
    sides changed since its scores were entered stays unresolved until it
    is scored again. Running this twice gives the same bracket.
    """
    matches_by_id = {match.id: match for round_matches in rounds for match in round_matches}

    for round_matches in rounds[1:]:
        for match in round_matches:
            match.team_a = None
            match.team_b = None

    for round_matches in rounds:
        for match in round_matches:
            if not match.is_bye:
                match.winner = determine_winner(match)
            if match.winner is None or match.parent_id is None:
                continue
            parent = matches_by_id[match.parent_id]
            if match.slot_idx % 2 == 0:
                parent.team_a = match.winner
            else:
                parent.team_b = match.winner
    return rounds


def parse_score(value) -> Optional[float]:
    """
    Parse a score field. Empty, non-numeric, non-finite or negative input
    counts as no score.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return int(number) if number.is_integer() else number


def get_round_name(round_idx: int, total_rounds: int, matches_in_round: int) -> str:
    """Get the name of a round based on how many matches it holds."""
    if matches_in_round == 1:
        return "Final"
    elif matches_in_round == 2:
        return "Semifinal"
    elif matches_in_round == 4:
        return "Quarterfinal"
    else:
        return f"Round of {2 * matches_in_round}"


def get_round_labels(rounds: List[List[Match]]) -> List[str]:
    total_rounds = len(rounds)
    return [get_round_name(idx, total_rounds, len(round_matches)) for idx, round_matches in enumerate(rounds)]


def get_placements(rounds: List[List[Match]]) -> Dict[str, Optional[str]]:
    """Gold and silver from the final; both None until the final is decided."""
    placements = {'gold': None, 'silver': None}
    if not rounds or not rounds[-1]:
        return placements
    final = rounds[-1][0]
    if final.winner is not None:
        placements['gold'] = final.winner
        placements['silver'] = final.loser
    return placements


def get_bracket_display(tournament) -> Dict:
    """
    Get bracket data formatted for a renderer.
    """
    rounds = tournament.rounds
    labels = get_round_labels(rounds)
    placements = get_placements(rounds)
    total_teams = len(tournament.teams)

    return {
        'tournament_id': tournament.id,
        'name': tournament.name,
        'format': tournament.format,
        'seeding': tournament.seeding,
        'teams': list(tournament.teams),
        'total_teams': total_teams,
        'bracket_size': calculate_bracket_size(len(rounds[0]) * 2) if rounds else 0,
        'total_rounds': len(rounds),
        'byes': sum(1 for m in rounds[0] if m.is_bye) if rounds else 0,
        'rounds': [
            {'name': label, 'matches': [m.to_dict() for m in round_matches]}
            for label, round_matches in zip(labels, rounds)
        ],
        'placements': placements,
        'champion': placements['gold'],
    }
