# Command line entry point: build a bracket from a team file and print it

import argparse
import sys
import yaml
from bracket.elimination import build_rounds, get_placements, get_round_labels, parse_score, propagate_winners
from bracket.errors import BracketError
from bracket.models import SEEDINGS, Tournament


def load_tournament(file_path):
    """Load teams from a YAML list, or a mapping with 'teams' (and optional 'name')."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file)
    if isinstance(data, list):
        name, teams = 'Tournament', data
    elif isinstance(data, dict):
        name, teams = data.get('name', 'Tournament'), data.get('teams') or []
    else:
        raise ValueError(f'{file_path}: expected a list of teams or a mapping with "teams"')
    teams = [str(team).strip() for team in teams if team is not None and str(team).strip()]
    return Tournament(id='cli', name=name, teams=list(dict.fromkeys(teams)))


def load_results(file_path):
    """Load results as {match_id: [score_a, score_b]}."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file)
    return data if isinstance(data, dict) else {}


def apply_results(tournament, results):
    for match in tournament.iter_matches():
        scores = results.get(match.id)
        if not isinstance(scores, (list, tuple)) or len(scores) != 2:
            continue
        match.score_a = parse_score(scores[0])
        match.score_b = parse_score(scores[1])
    propagate_winners(tournament.rounds)


def format_team(team):
    return team if team is not None else 'TBD'


def print_bracket(tournament):
    print(f"\n--- {tournament.name} ---")
    for label, round_matches in zip(get_round_labels(tournament.rounds), tournament.rounds):
        print(f"\n{label}")
        for match in round_matches:
            if match.is_bye:
                print(f"  {match.id}: {match.winner} (bye)")
                continue
            line = f"  {match.id}: {format_team(match.team_a)} vs {format_team(match.team_b)}"
            if match.score_a is not None and match.score_b is not None:
                line += f"  {match.score_a}-{match.score_b}"
            if match.winner:
                line += f"  -> {match.winner}"
            print(line)

    placements = get_placements(tournament.rounds)
    if placements['gold']:
        print(f"\nGold: {placements['gold']}")
        print(f"Silver: {placements['silver']}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Build a single elimination bracket from a YAML team list'
    )
    parser.add_argument('teams_file', help='YAML file with the teams in seed order')
    parser.add_argument(
        '--seeding',
        choices=SEEDINGS,
        default='input',
        help='Keep the file order (input) or shuffle the teams (random)'
    )
    parser.add_argument(
        '--results',
        help='YAML file mapping match ids (e.g. R1-M1) to [score_a, score_b]'
    )
    args = parser.parse_args(argv)

    try:
        tournament = load_tournament(args.teams_file)
        tournament.seeding = args.seeding
        tournament.rounds = build_rounds(tournament.teams, tournament.seeding)
        if args.results:
            apply_results(tournament, load_results(args.results))
    except (OSError, ValueError, yaml.YAMLError, BracketError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_bracket(tournament)
    return 0


if __name__ == '__main__':
    sys.exit(main())
