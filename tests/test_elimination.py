"""
Unit tests for single elimination bracket construction and labelling.
"""
import pytest
import random
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.elimination import (
    calculate_bracket_size,
    calculate_byes,
    seed_teams,
    place_teams,
    build_rounds,
    get_round_name,
    get_round_labels,
    get_placements,
    get_bracket_display,
    _generate_bracket_order
)
from bracket.errors import InsufficientTeams, InvalidSetting
from bracket.models import Tournament


def team_names(n):
    return [f"Team {i}" for i in range(1, n + 1)]


class TestBracketHelpers:
    """Tests for bracket helper functions."""

    def test_calculate_bracket_size_exact_power(self):
        assert calculate_bracket_size(2) == 2
        assert calculate_bracket_size(4) == 4
        assert calculate_bracket_size(8) == 8
        assert calculate_bracket_size(16) == 16

    def test_calculate_bracket_size_not_power(self):
        """Test bracket size rounds up to next power of 2."""
        assert calculate_bracket_size(3) == 4
        assert calculate_bracket_size(5) == 8
        assert calculate_bracket_size(9) == 16
        assert calculate_bracket_size(17) == 32

    def test_calculate_bracket_size_zero(self):
        assert calculate_bracket_size(0) == 0

    def test_calculate_byes(self):
        assert calculate_byes(8) == 0
        assert calculate_byes(7) == 1
        assert calculate_byes(5) == 3
        assert calculate_byes(12) == 4


class TestBracketOrder:
    """Tests for bracket ordering (seeding)."""

    def test_bracket_order_2_teams(self):
        assert _generate_bracket_order(2) == [1, 2]

    def test_bracket_order_4_teams(self):
        # 1v4, 2v3 so the top two seeds can only meet in the final
        assert _generate_bracket_order(4) == [1, 4, 2, 3]

    def test_bracket_order_8_teams(self):
        assert _generate_bracket_order(8) == [1, 8, 4, 5, 2, 7, 3, 6]

    def test_top_two_seeds_in_opposite_halves(self):
        for size in (4, 8, 16, 32):
            order = _generate_bracket_order(size)
            half = size // 2
            assert 1 in order[:half]
            assert 2 in order[half:]

    def test_bracket_order_is_a_permutation(self):
        order = _generate_bracket_order(32)
        assert sorted(order) == list(range(1, 33))


class TestSeeding:
    """Tests for seed order and slot placement."""

    def test_input_seeding_keeps_order(self):
        teams = ["A", "B", "C"]
        seeded = seed_teams(teams, 'input')
        assert seeded == ["A", "B", "C"]
        assert seeded is not teams

    def test_random_seeding_is_a_shuffled_copy(self):
        teams = team_names(10)
        seeded = seed_teams(teams, 'random', random.Random(3))
        assert sorted(seeded) == sorted(teams)
        assert teams == team_names(10)

    def test_random_seeding_reproducible_with_same_rng_seed(self):
        teams = team_names(8)
        assert seed_teams(teams, 'random', random.Random(7)) == seed_teams(teams, 'random', random.Random(7))

    def test_unknown_seeding_rejected(self):
        with pytest.raises(InvalidSetting):
            seed_teams(["A", "B"], 'alphabetical')

    def test_place_teams_leaves_byes_empty(self):
        slots = place_teams(["A", "B", "C"], 4)
        assert slots == ["A", None, "B", "C"]


class TestBuildRounds:
    """Tests for building the round structure."""

    def test_four_teams_first_round_pairings(self, four_teams):
        rounds = build_rounds(four_teams)

        assert len(rounds) == 2
        first_round = rounds[0]
        assert [(m.team_a, m.team_b) for m in first_round] == [("A", "D"), ("B", "C")]
        final = rounds[1][0]
        assert final.team_a is None
        assert final.team_b is None
        assert final.parent_id is None

    def test_two_teams_single_final(self):
        rounds = build_rounds(["A", "B"])

        assert len(rounds) == 1
        final = rounds[0][0]
        assert (final.team_a, final.team_b) == ("A", "B")
        assert final.parent_id is None
        assert final.match_number == 1

    @pytest.mark.parametrize("num_teams", range(2, 34))
    def test_round_counts(self, num_teams):
        rounds = build_rounds(team_names(num_teams))
        bracket_size = calculate_bracket_size(num_teams)

        assert 2 ** len(rounds) == bracket_size
        assert len(rounds[0]) == bracket_size // 2
        for earlier, later in zip(rounds, rounds[1:]):
            assert len(later) * 2 == len(earlier)
        assert len(rounds[-1]) == 1

    @pytest.mark.parametrize("num_teams", [3, 5, 8, 11, 16])
    def test_parent_links_form_a_binary_tree(self, num_teams):
        rounds = build_rounds(team_names(num_teams))
        ids_by_round = [{m.id for m in round_matches} for round_matches in rounds]

        for round_idx, round_matches in enumerate(rounds[:-1]):
            for match in round_matches:
                assert match.parent_id in ids_by_round[round_idx + 1]

        for round_idx, round_matches in enumerate(rounds[1:], start=1):
            for parent in round_matches:
                children = [m for m in rounds[round_idx - 1] if m.parent_id == parent.id]
                assert len(children) == 2
                assert {c.slot_idx % 2 for c in children} == {0, 1}

        finals = [m for round_matches in rounds for m in round_matches if m.parent_id is None]
        assert finals == [rounds[-1][0]]

    def test_match_ids_unique(self):
        rounds = build_rounds(team_names(13))
        ids = [m.id for round_matches in rounds for m in round_matches]
        assert len(ids) == len(set(ids))
        assert rounds[0][0].id == "R1-M1"
        assert rounds[-1][0].id == "R4-M1"

    def test_every_team_placed_once(self):
        teams = team_names(11)
        rounds = build_rounds(teams)
        placed = [t for m in rounds[0] for t in (m.team_a, m.team_b) if t is not None]
        assert sorted(placed) == sorted(teams)

    def test_teams_list_not_modified(self):
        teams = team_names(6)
        build_rounds(teams, 'random', random.Random(1))
        assert teams == team_names(6)

    def test_insufficient_teams(self):
        with pytest.raises(InsufficientTeams):
            build_rounds(["A"])
        with pytest.raises(InsufficientTeams):
            build_rounds([])

    def test_random_seeding_uses_rng(self):
        teams = team_names(8)
        first = build_rounds(teams, 'random', random.Random(11))
        second = build_rounds(teams, 'random', random.Random(11))
        assert [m.to_dict() for m in first[0]] == [m.to_dict() for m in second[0]]

    def test_rebuild_produces_new_value(self, four_teams):
        first = build_rounds(four_teams)
        second = build_rounds(four_teams)
        assert first is not second
        assert first[0][0] is not second[0][0]


class TestByes:
    """Tests for bye placement and automatic advancement."""

    def test_three_teams_top_seed_gets_bye(self, three_teams):
        rounds = build_rounds(three_teams)

        bye = rounds[0][0]
        assert bye.is_bye
        assert bye.team_a == "A"
        assert bye.team_b is None
        assert bye.winner == "A"

        played = rounds[0][1]
        assert not played.is_bye
        assert (played.team_a, played.team_b) == ("B", "C")
        assert played.winner is None

        final = rounds[1][0]
        assert final.team_a == "A"
        assert final.team_b is None

    @pytest.mark.parametrize("num_teams", [3, 5, 6, 7, 9, 12, 15, 20])
    def test_bye_count_and_advancement(self, num_teams):
        rounds = build_rounds(team_names(num_teams))
        matches_by_id = {m.id: m for round_matches in rounds for m in round_matches}
        byes = [m for m in rounds[0] if m.is_bye]

        assert len(byes) == calculate_byes(num_teams)
        for bye in byes:
            parent = matches_by_id[bye.parent_id]
            side = parent.team_a if bye.slot_idx % 2 == 0 else parent.team_b
            assert side == bye.winner

    def test_byes_go_to_top_seeds(self):
        teams = team_names(5)
        rounds = build_rounds(teams)
        bye_teams = {m.winner for m in rounds[0] if m.is_bye}
        assert bye_teams == {"Team 1", "Team 2", "Team 3"}

    def test_no_byes_for_power_of_two(self):
        rounds = build_rounds(team_names(8))
        assert not any(m.is_bye for m in rounds[0])

    def test_match_numbers_skip_byes_and_unknown_pairings(self):
        rounds = build_rounds(team_names(5))

        numbered = [(m.id, m.match_number) for round_matches in rounds for m in round_matches
                    if m.match_number is not None]
        # Only 4v5 is playable in round 0; 2v3 meet in round 1 after both byes
        assert numbered == [("R1-M2", 1), ("R2-M2", 2)]
        assert rounds[0][0].match_number is None
        assert rounds[1][0].match_number is None

    def test_match_numbers_sequential_without_byes(self):
        rounds = build_rounds(team_names(8))
        assert [m.match_number for m in rounds[0]] == [1, 2, 3, 4]
        assert all(m.match_number is None for m in rounds[1] + rounds[2])


class TestRoundLabels:
    """Tests for round naming."""

    def test_round_names_by_match_count(self):
        assert get_round_name(2, 3, 1) == "Final"
        assert get_round_name(1, 3, 2) == "Semifinal"
        assert get_round_name(0, 3, 4) == "Quarterfinal"
        assert get_round_name(0, 4, 8) == "Round of 16"
        assert get_round_name(0, 5, 16) == "Round of 32"

    def test_labels_for_eight_teams(self):
        rounds = build_rounds(team_names(8))
        assert get_round_labels(rounds) == ["Quarterfinal", "Semifinal", "Final"]

    def test_labels_for_three_teams(self, three_teams):
        assert get_round_labels(build_rounds(three_teams)) == ["Semifinal", "Final"]

    def test_labels_for_nine_teams(self):
        rounds = build_rounds(team_names(9))
        assert get_round_labels(rounds) == ["Round of 16", "Quarterfinal", "Semifinal", "Final"]


class TestPlacements:
    """Tests for gold/silver resolution."""

    def test_no_placements_before_final(self, four_teams):
        assert get_placements(build_rounds(four_teams)) == {'gold': None, 'silver': None}

    def test_no_placements_without_rounds(self):
        assert get_placements([]) == {'gold': None, 'silver': None}

    def test_two_team_final(self):
        rounds = build_rounds(["A", "B"])
        final = rounds[0][0]
        final.score_a, final.score_b = 1, 3
        final.winner = "B"
        assert get_placements(rounds) == {'gold': "B", 'silver': "A"}


class TestBracketDisplay:
    """Tests for the renderer summary."""

    def test_display_summary(self):
        tournament = Tournament(id="t1", name="Cup", teams=team_names(6))
        tournament.rounds = build_rounds(tournament.teams)

        display = get_bracket_display(tournament)

        assert display['total_teams'] == 6
        assert display['bracket_size'] == 8
        assert display['total_rounds'] == 3
        assert display['byes'] == 2
        assert [r['name'] for r in display['rounds']] == ["Quarterfinal", "Semifinal", "Final"]
        assert display['rounds'][0]['matches'][0]['id'] == "R1-M1"
        assert display['champion'] is None

    def test_display_without_bracket(self):
        tournament = Tournament(id="t1", name="Cup", teams=["A"])
        display = get_bracket_display(tournament)
        assert display['rounds'] == []
        assert display['bracket_size'] == 0
        assert display['byes'] == 0
