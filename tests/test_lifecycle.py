"""
Tests for cycle status and ballot eligibility rules
"""

from datetime import timedelta

import pytest

from conftest import make_employee, make_location
from voting.lifecycle import (
    CycleStatus,
    EligibilityCode,
    check_ballot,
    check_cycle_membership,
    check_selection,
    cycle_status,
    normalize_id_list,
)


class TestCycleStatus:
    """Window is inclusive at both ends; ended means strictly after end_at"""

    def test_upcoming_before_start(self, world):
        assert cycle_status(world.cycle, world.before_start) is CycleStatus.UPCOMING

    def test_active_at_start_boundary(self, world):
        assert cycle_status(world.cycle, world.cycle.start_at) is CycleStatus.ACTIVE

    def test_active_at_end_boundary(self, world):
        assert cycle_status(world.cycle, world.cycle.end_at) is CycleStatus.ACTIVE

    def test_ended_just_after_end(self, world):
        moment = world.cycle.end_at + timedelta(microseconds=1)
        assert cycle_status(world.cycle, moment) is CycleStatus.ENDED


class TestCheckBallot:
    def test_valid_ballot(self, world):
        verdict = check_ballot(world.cycle, world.ana.id, [world.ben.id, world.chloe.id], False, world.before_end)
        assert verdict.ok

    def test_not_started_wins_over_everything(self, world):
        verdict = check_ballot(world.cycle, "emp_nobody", [], True, world.before_start)
        assert verdict.code is EligibilityCode.NOT_STARTED
        assert verdict.message == "Voting has not started yet"

    def test_ended(self, world):
        verdict = check_ballot(world.cycle, world.ana.id, [world.ben.id], False, world.after_end)
        assert verdict.code is EligibilityCode.ENDED

    def test_unauthorized_before_already_voted(self, world):
        verdict = check_ballot(world.cycle, "emp_nobody", [world.ben.id], True, world.before_end)
        assert verdict.code is EligibilityCode.UNAUTHORIZED

    def test_already_voted_before_selection_rules(self, world):
        verdict = check_ballot(world.cycle, world.ana.id, [], True, world.before_end)
        assert verdict.code is EligibilityCode.ALREADY_VOTED
        assert verdict.message == "You have already voted in this poll"

    def test_voter_may_select_themselves(self, world):
        verdict = check_ballot(world.cycle, world.ana.id, [world.ana.id], False, world.before_end)
        assert verdict.ok


class TestCheckSelection:
    def test_empty(self, world):
        assert check_selection(world.cycle, []).code is EligibilityCode.EMPTY_SELECTION

    def test_too_many(self, world):
        verdict = check_selection(world.cycle, [world.ana.id, world.ben.id, world.chloe.id])
        assert verdict.code is EligibilityCode.TOO_MANY_SELECTIONS
        assert verdict.message == "You can select up to 2 nominees"

    def test_size_checked_before_membership(self, world):
        verdict = check_selection(world.cycle, ["x", "y", "z"])
        assert verdict.code is EligibilityCode.TOO_MANY_SELECTIONS

    def test_non_nominee(self, world):
        verdict = check_selection(world.cycle, [world.ana.id, world.erin.id])
        assert verdict.code is EligibilityCode.INVALID_NOMINEE


class TestNormalizeIdList:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, []),
            ([], []),
            ([" a ", "b", "a", ""], ["a", "b"]),
            (["b", None, "a", "b"], ["b", "a"]),
        ],
    )
    def test_normalization(self, raw, expected):
        assert normalize_id_list(raw) == expected


class TestCycleMembership:
    def test_valid(self, world):
        error = check_cycle_membership(
            world.cycle.location_ids, [world.ana, world.dev], [world.chloe]
        )
        assert error is None

    def test_voter_outside_locations(self, world):
        error = check_cycle_membership([world.downtown.id], [world.ana, world.dev], [world.ana])
        assert error == "Voter Dev Patel (E103) is not assigned to any of the selected locations"

    def test_nominee_outside_locations(self, world):
        harbor = make_location("Harbor", "HB03")
        drifter = make_employee("Hal", "Moss", "E107", [harbor])

        error = check_cycle_membership(world.cycle.location_ids, [world.ana], [drifter])

        assert error.startswith("Nominee Hal Moss (E107)")
