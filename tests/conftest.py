"""Shared fixtures: a small two-store roster and one cycle over it

Stores:   DT01 Downtown, AP02 Airport
Staff:    Ana, Ben (DT01), Chloe (DT01 + AP02), Dev, Erin (AP02, no email)
Cycle:    both stores, everyone votes, Ana/Ben/Chloe/Dev are nominees,
          5 points per vote, up to 2 selections, open now +/- 1 day

two_stores is a separate closed cycle for store-level result scenarios.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from database.id_generation import generate_employee_id, generate_location_id
from database.models import Ballot, Employee, Location, VotingCycle
from fakes import FakeDatabase, FakeMailer

# Real clock so API tests, which cannot inject "now", see the same window
NOW = datetime.now(timezone.utc).replace(microsecond=0)


def make_location(name: str, code: str) -> Location:
    return Location(id=generate_location_id(code), name=name, code=code)


def make_employee(first: str, last: str, code: str, locations, email=None) -> Employee:
    return Employee(
        id=generate_employee_id(code),
        first_name=first,
        last_name=last,
        employee_code=code,
        email=email,
        location_ids=[loc.id for loc in locations],
    )


def make_ballot(cycle_id: str, voter: Employee, *nominees: Employee) -> Ballot:
    return Ballot(
        id=f"bal_{voter.id}",
        cycle_id=cycle_id,
        voter_id=voter.id,
        nominee_ids=[n.id for n in nominees],
        created_at=NOW,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def world():
    downtown = make_location("Downtown", "DT01")
    airport = make_location("Airport", "AP02")

    ana = make_employee("Ana", "Ruiz", "E100", [downtown], "ana@example.com")
    ben = make_employee("Ben", "Okafor", "E101", [downtown], "ben@example.com")
    chloe = make_employee("Chloe", "Nguyen", "E102", [downtown, airport], "chloe@example.com")
    dev = make_employee("Dev", "Patel", "E103", [airport], "dev@example.com")
    erin = make_employee("Erin", "Walsh", "E104", [airport])

    cycle = VotingCycle(
        id="cyc_test",
        name="March Stars",
        location_ids=[downtown.id, airport.id],
        start_at=NOW - timedelta(days=1),
        end_at=NOW + timedelta(days=1),
        voter_ids=[ana.id, ben.id, chloe.id, dev.id, erin.id],
        nominee_ids=[ana.id, ben.id, chloe.id, dev.id],
        vote_points=5,
        max_votes_per_voter=2,
        created_at=NOW - timedelta(days=2),
    )

    return SimpleNamespace(
        downtown=downtown,
        airport=airport,
        ana=ana,
        ben=ben,
        chloe=chloe,
        dev=dev,
        erin=erin,
        cycle=cycle,
        before_end=NOW,
        after_end=NOW + timedelta(days=2),
        before_start=NOW - timedelta(days=2),
    )


@pytest.fixture
def two_stores():
    """Closed cycle over L1 (N1, N2) and L2 (N3), 2 points per vote, one pick each

    Voters V1-V4 are not nominees; callers add the ballots.
    """
    l1 = make_location("Lakeside", "L1")
    l2 = make_location("Hilltop", "L2")

    n1 = make_employee("Nia", "Brooks", "N1", [l1], "nia@example.com")
    n2 = make_employee("Omar", "Hale", "N2", [l1], "omar@example.com")
    n3 = make_employee("Pia", "Stone", "N3", [l2], "pia@example.com")
    voters = [
        make_employee(f"Voter{i}", "Test", f"V{i}", [l1 if i < 4 else l2], f"v{i}@example.com")
        for i in range(1, 5)
    ]

    cycle = VotingCycle(
        id="cyc_two_stores",
        name="Quarter Picks",
        location_ids=[l1.id, l2.id],
        start_at=NOW - timedelta(days=3),
        end_at=NOW - timedelta(days=1),
        voter_ids=[v.id for v in voters],
        nominee_ids=[n1.id, n2.id, n3.id],
        vote_points=2,
        max_votes_per_voter=1,
        created_at=NOW - timedelta(days=4),
    )

    return SimpleNamespace(l1=l1, l2=l2, n1=n1, n2=n2, n3=n3, voters=voters, cycle=cycle)


@pytest.fixture
def db(world):
    database = FakeDatabase()
    for location in (world.downtown, world.airport):
        database.directory.locations[location.id] = location
    for person in (world.ana, world.ben, world.chloe, world.dev, world.erin):
        database.directory.employees[person.id] = person
    database.cycles.cycles[world.cycle.id] = world.cycle
    return database


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
async def client(db, mailer):
    """API client over the real app with the fakes on app.state

    The lifespan never runs, so no Postgres connection is attempted.
    """
    from server.main import app

    app.state.db = db
    app.state.mailer = mailer
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
