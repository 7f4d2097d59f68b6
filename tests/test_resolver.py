"""
Tests for tie detection, winner resolution and announcement checks
"""

from datetime import timedelta

from conftest import make_ballot, make_employee
from database.models import WinnerRecord
from voting.resolver import (
    AnnouncementCode,
    check_announcement,
    has_unresolved_tie,
    resolve_cycle,
    resolve_location,
)
from voting.tally import CycleSnapshot, compute_tally


def build(world, *ballots):
    snapshot = CycleSnapshot(
        cycle=world.cycle,
        locations=[world.downtown, world.airport],
        nominees=[world.ana, world.ben, world.chloe, world.dev],
    )
    return snapshot, compute_tally(snapshot, list(ballots))


def record(world, location, nominee):
    return WinnerRecord(
        cycle_id=world.cycle.id,
        location_id=location.id,
        employee_id=nominee.id,
        announced_at=world.after_end,
    )


class TestSingleLeader:
    def test_auto_winner_once_ended(self, world):
        _, tally = build(
            world,
            make_ballot(world.cycle.id, world.ben, world.chloe),
            make_ballot(world.cycle.id, world.dev, world.chloe, world.ana),
        )

        result = resolve_location(tally, world.downtown.id, None, cycle_ended=True)

        assert result.max_votes == 2
        assert [s.employee_id for s in result.top_nominees] == [world.chloe.id]
        assert not result.is_tie
        assert result.official_winner.is_auto
        assert result.official_winner.employee_id == world.chloe.id
        assert result.official_winner.announced_at is None

    def test_no_auto_winner_while_running(self, world):
        _, tally = build(world, make_ballot(world.cycle.id, world.ben, world.chloe))

        result = resolve_location(tally, world.downtown.id, None, cycle_ended=False)

        assert result.official_winner is None
        assert not result.needs_tie_resolution

    def test_nominees_sorted_by_location_votes(self, world):
        _, tally = build(
            world,
            make_ballot(world.cycle.id, world.ana, world.ben),
            make_ballot(world.cycle.id, world.chloe, world.ben),
            make_ballot(world.cycle.id, world.dev, world.chloe),
        )

        result = resolve_location(tally, world.downtown.id, None, cycle_ended=True)

        # Ana and Dev tie at zero and keep the cycle's nominee order
        assert [s.employee_id for s in result.nominees] == [
            world.ben.id,
            world.chloe.id,
            world.ana.id,
            world.dev.id,
        ]


class TestTies:
    def test_tie_needs_resolution_after_end(self, world):
        _, tally = build(
            world,
            make_ballot(world.cycle.id, world.ana, world.ana),
            make_ballot(world.cycle.id, world.ben, world.ben),
        )

        result = resolve_location(tally, world.downtown.id, None, cycle_ended=True)

        assert result.is_tie
        assert {s.employee_id for s in result.top_nominees} == {world.ana.id, world.ben.id}
        assert result.official_winner is None
        assert result.needs_tie_resolution

    def test_tie_while_running_is_not_flagged(self, world):
        _, tally = build(
            world,
            make_ballot(world.cycle.id, world.ana, world.ana),
            make_ballot(world.cycle.id, world.ben, world.ben),
        )

        result = resolve_location(tally, world.downtown.id, None, cycle_ended=False)

        assert result.is_tie
        assert not result.needs_tie_resolution

    def test_manual_record_resolves_tie(self, world):
        _, tally = build(
            world,
            make_ballot(world.cycle.id, world.ana, world.ana),
            make_ballot(world.cycle.id, world.ben, world.ben),
        )

        result = resolve_location(
            tally, world.downtown.id, record(world, world.downtown, world.ben), cycle_ended=True
        )

        assert result.official_winner.employee_id == world.ben.id
        assert not result.official_winner.is_auto
        assert result.official_winner.announced_at == world.after_end
        assert not result.needs_tie_resolution

    def test_record_for_removed_nominee_yields_no_winner(self, world):
        _, tally = build(world, make_ballot(world.cycle.id, world.ana, world.chloe))
        stranger = make_employee("Sam", "Lee", "E500", [world.downtown])

        result = resolve_location(
            tally, world.downtown.id, record(world, world.downtown, stranger), cycle_ended=True
        )

        assert result.official_winner is None


class TestZeroVotes:
    def test_store_without_votes(self, world):
        _, tally = build(world, make_ballot(world.cycle.id, world.ana, world.ana))

        result = resolve_location(tally, world.airport.id, None, cycle_ended=True)

        assert result.total_votes == 0
        assert result.max_votes == 0
        assert result.top_nominees == []
        assert not result.is_tie
        assert result.official_winner is None
        assert result.to_dict()["winner"] is None

    def test_unknown_location(self, world):
        _, tally = build(world)
        assert resolve_location(tally, "loc_missing", None, cycle_ended=True) is None


class TestResolveCycle:
    def test_cycle_order_and_unresolved_flag(self, world):
        _, tally = build(
            world,
            make_ballot(world.cycle.id, world.ana, world.ana),
            make_ballot(world.cycle.id, world.ben, world.ben),
            make_ballot(world.cycle.id, world.erin, world.dev),
        )

        results = resolve_cycle(tally, [], cycle_ended=True)

        assert [r.location_id for r in results] == [world.downtown.id, world.airport.id]
        assert has_unresolved_tie(results)
        assert results[1].official_winner.employee_id == world.dev.id

    def test_announced_tie_clears_flag(self, world):
        _, tally = build(
            world,
            make_ballot(world.cycle.id, world.ana, world.ana),
            make_ballot(world.cycle.id, world.ben, world.ben),
        )

        results = resolve_cycle(tally, [record(world, world.downtown, world.ana)], cycle_ended=True)

        assert not has_unresolved_tie(results)


class TestAnnouncementCheck:
    def tied(self, world):
        return build(
            world,
            make_ballot(world.cycle.id, world.ana, world.ana),
            make_ballot(world.cycle.id, world.ben, world.ben),
        )

    def test_allowed_for_top_nominee_in_tie(self, world):
        snapshot, tally = self.tied(world)

        check = check_announcement(snapshot, tally, world.downtown.id, world.ana.id, world.after_end)

        assert check.ok
        assert check.result.is_tie

    def test_refused_before_end(self, world):
        snapshot, tally = self.tied(world)

        check = check_announcement(snapshot, tally, world.downtown.id, world.ana.id, world.cycle.end_at)

        assert check.code is AnnouncementCode.NOT_ENDED

    def test_refused_for_unknown_location(self, world):
        snapshot, tally = self.tied(world)

        check = check_announcement(snapshot, tally, "loc_other", world.ana.id, world.after_end)

        assert check.code is AnnouncementCode.UNKNOWN_LOCATION

    def test_refused_for_non_nominee(self, world):
        snapshot, tally = self.tied(world)

        check = check_announcement(snapshot, tally, world.downtown.id, world.erin.id, world.after_end)

        assert check.code is AnnouncementCode.UNKNOWN_NOMINEE

    def test_refused_without_votes(self, world):
        snapshot, tally = self.tied(world)

        check = check_announcement(snapshot, tally, world.airport.id, world.dev.id, world.after_end)

        assert check.code is AnnouncementCode.NO_VOTES

    def test_refused_for_single_leader(self, world):
        snapshot, tally = build(world, make_ballot(world.cycle.id, world.ana, world.ana))

        check = check_announcement(snapshot, tally, world.downtown.id, world.ana.id, world.after_end)

        assert check.code is AnnouncementCode.NO_TIE
        assert "only allowed when there is a tie" in check.reason

    def test_refused_for_trailing_nominee(self, world):
        snapshot, tally = self.tied(world)

        check = check_announcement(snapshot, tally, world.downtown.id, world.chloe.id, world.after_end)

        assert check.code is AnnouncementCode.NOT_TOP_NOMINEE

    def test_existing_record_does_not_block_reannouncement(self, world):
        snapshot, tally = self.tied(world)
        later = world.after_end + timedelta(hours=1)

        first = check_announcement(snapshot, tally, world.downtown.id, world.ana.id, world.after_end)
        second = check_announcement(snapshot, tally, world.downtown.id, world.ben.id, later)

        assert first.ok and second.ok
