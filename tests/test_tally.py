"""
Tests for the cycle tally

Covers vote attribution to nominee locations, de-duplication of
selections, points and percentages, and zero-data behavior.
"""

import pytest

from conftest import make_ballot, make_employee, make_location
from voting.resolver import resolve_cycle
from voting.tally import CycleSnapshot, compute_tally, percentage


def snapshot_for(world, nominees=None):
    return CycleSnapshot(
        cycle=world.cycle,
        locations=[world.downtown, world.airport],
        nominees=nominees or [world.ana, world.ben, world.chloe, world.dev],
    )


@pytest.fixture
def ballots(world):
    cid = world.cycle.id
    return [
        make_ballot(cid, world.ana, world.chloe, world.dev),
        make_ballot(cid, world.ben, world.chloe),
        make_ballot(cid, world.dev, world.ana, world.ana),
    ]


class TestPercentage:
    def test_zero_denominator_is_zero(self):
        assert percentage(3, 0) == 0.0

    def test_regular_ratio(self):
        assert percentage(1, 4) == 25.0


class TestEmptyTally:
    """No ballots is a valid all-zero result, not an error"""

    def test_all_counts_zero(self, world):
        tally = compute_tally(snapshot_for(world), [])

        assert tally.total_ballots == 0
        assert tally.total_selections == 0
        assert tally.total_voters == 5
        assert [n.total_votes for n in tally.nominees] == [0, 0, 0, 0]
        assert [n.overall_percentage for n in tally.nominees] == [0.0] * 4
        assert [s.total_nominee_votes for s in tally.locations] == [0, 0]

    def test_every_nominee_and_location_present(self, world):
        tally = compute_tally(snapshot_for(world), [])

        assert [n.employee.id for n in tally.nominees] == world.cycle.nominee_ids
        assert [s.location.id for s in tally.locations] == world.cycle.location_ids


class TestNomineeCounts:
    def test_totals_and_points(self, world, ballots):
        tally = compute_tally(snapshot_for(world), ballots)

        assert tally.nominee(world.chloe.id).total_votes == 2
        assert tally.nominee(world.chloe.id).total_points == 10
        assert tally.nominee(world.dev.id).total_votes == 1
        assert tally.nominee(world.ben.id).total_votes == 0

    def test_duplicate_selection_counts_once(self, world, ballots):
        tally = compute_tally(snapshot_for(world), ballots)

        assert tally.nominee(world.ana.id).total_votes == 1
        assert tally.total_selections == 4

    def test_overall_percentage_uses_total_selections(self, world, ballots):
        tally = compute_tally(snapshot_for(world), ballots)

        assert tally.nominee(world.chloe.id).overall_percentage == 50.0
        assert tally.nominee(world.dev.id).overall_percentage == 25.0

    def test_unknown_nominee_counts_toward_selections_only(self, world):
        ghost = make_employee("Gone", "Person", "E999", [world.downtown])
        ballots = [make_ballot(world.cycle.id, world.ana, world.chloe, ghost)]

        tally = compute_tally(snapshot_for(world), ballots)

        assert tally.total_selections == 2
        assert tally.nominee(ghost.id) is None
        assert tally.nominee(world.chloe.id).overall_percentage == 50.0


class TestLocationAttribution:
    """Votes follow the nominee's stores, not the voter's"""

    def test_multi_store_nominee_credited_everywhere(self, world, ballots):
        tally = compute_tally(snapshot_for(world), ballots)
        chloe = tally.nominee(world.chloe.id)

        assert chloe.votes_by_location == {world.downtown.id: 2, world.airport.id: 2}

    def test_location_totals(self, world, ballots):
        tally = compute_tally(snapshot_for(world), ballots)

        assert tally.location_summary(world.downtown.id).total_nominee_votes == 3
        assert tally.location_summary(world.airport.id).total_nominee_votes == 3

    def test_location_totals_may_exceed_selections(self, world, ballots):
        tally = compute_tally(snapshot_for(world), ballots)

        assert sum(s.total_nominee_votes for s in tally.locations) > tally.total_selections

    def test_voter_store_is_irrelevant(self, world):
        # Dev works at the airport but votes for Ana, who only works downtown
        ballots = [make_ballot(world.cycle.id, world.dev, world.ana)]

        tally = compute_tally(snapshot_for(world), ballots)

        assert tally.location_summary(world.downtown.id).total_nominee_votes == 1
        assert tally.location_summary(world.airport.id).total_nominee_votes == 0

    def test_store_outside_cycle_gets_nothing(self, world):
        harbor = make_location("Harbor", "HB03")
        drifter = make_employee("Hal", "Moss", "E107", [harbor])
        ballots = [make_ballot(world.cycle.id, world.ana, drifter)]

        tally = compute_tally(snapshot_for(world, nominees=[drifter]), ballots)

        assert tally.nominee(drifter.id).total_votes == 1
        assert tally.nominee(drifter.id).votes_by_location == {}
        assert all(s.total_nominee_votes == 0 for s in tally.locations)

    def test_location_stats_include_unassigned_nominees(self, world, ballots):
        tally = compute_tally(snapshot_for(world), ballots)
        stats = {s.employee_id: s for s in tally.location_stats(world.downtown.id)}

        assert set(stats) == set(world.cycle.nominee_ids)
        assert stats[world.dev.id].location_votes == 0
        assert stats[world.chloe.id].location_points == 10
        assert stats[world.chloe.id].location_percentage == pytest.approx(200 / 3)


class TestSerialization:
    def test_report_shape(self, world, ballots):
        data = compute_tally(snapshot_for(world), ballots).to_dict()

        assert data["cycle"]["total_ballots"] == 3
        assert data["cycle"]["vote_points"] == 5
        assert [loc["code"] for loc in data["cycle"]["locations"]] == ["DT01", "AP02"]
        chloe = next(n for n in data["nominees"] if n["id"] == world.chloe.id)
        assert {v["code"]: v["votes"] for v in chloe["votes_by_location"]} == {"DT01": 2, "AP02": 2}
        assert data["location_summary"][0]["total_nominee_votes"] == 3


class TestTallyProperties:
    def test_nominee_votes_sum_to_selections(self, world, ballots):
        tally = compute_tally(snapshot_for(world), ballots)

        assert tally.total_selections == 4
        assert sum(n.total_votes for n in tally.nominees) == tally.total_selections

    def test_percentages_stay_within_bounds(self, world, ballots):
        tally = compute_tally(snapshot_for(world), ballots)

        percentages = [n.overall_percentage for n in tally.nominees]
        for summary in tally.locations:
            percentages.extend(s.location_percentage for s in tally.location_stats(summary.location.id))

        assert len(percentages) == 4 + 4 * 2
        assert all(0.0 <= p <= 100.0 for p in percentages)

    def test_same_input_same_tally(self, world, ballots):
        snapshot = snapshot_for(world)

        first = compute_tally(snapshot, ballots)
        second = compute_tally(snapshot, ballots)

        assert first == second
        assert first.to_dict() == second.to_dict()
        assert [b.nominee_ids for b in ballots] == [
            [world.chloe.id, world.dev.id],
            [world.chloe.id],
            [world.ana.id, world.ana.id],
        ]


class TestTwoStoreCycle:
    """V1, V2 pick N1; V3 picks N2; V4 picks N3"""

    @pytest.fixture
    def tally(self, two_stores):
        s = two_stores
        snapshot = CycleSnapshot(cycle=s.cycle, locations=[s.l1, s.l2], nominees=[s.n1, s.n2, s.n3])
        v1, v2, v3, v4 = s.voters
        picks = [
            make_ballot(s.cycle.id, v1, s.n1),
            make_ballot(s.cycle.id, v2, s.n1),
            make_ballot(s.cycle.id, v3, s.n2),
            make_ballot(s.cycle.id, v4, s.n3),
        ]
        return compute_tally(snapshot, picks)

    def test_nominee_totals(self, two_stores, tally):
        totals = {
            n.employee.employee_code: (n.total_votes, n.total_points, n.overall_percentage)
            for n in tally.nominees
        }

        assert totals == {"N1": (2, 4, 50.0), "N2": (1, 2, 25.0), "N3": (1, 2, 25.0)}
        assert sum(n.total_votes for n in tally.nominees) == tally.total_selections == 4

    def test_location_totals(self, two_stores, tally):
        assert tally.location_summary(two_stores.l1.id).total_nominee_votes == 3
        assert tally.location_summary(two_stores.l2.id).total_nominee_votes == 1

        at_l1 = {s.employee_id: s for s in tally.location_stats(two_stores.l1.id)}
        assert at_l1[two_stores.n1.id].location_percentage == pytest.approx(66.7, abs=0.05)
        assert at_l1[two_stores.n1.id].location_points == 4

    def test_single_leaders_win_once_ended(self, two_stores, tally):
        l1, l2 = resolve_cycle(tally, [], cycle_ended=True)

        assert not l1.is_tie
        assert l1.official_winner.employee_id == two_stores.n1.id
        assert l1.official_winner.is_auto
        assert l2.official_winner.employee_id == two_stores.n3.id
