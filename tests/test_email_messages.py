"""
Tests for invite and winner summary email rendering
"""

from conftest import make_employee
from notifications.messages import (
    NO_VOTES_TEXT,
    PENDING_TEXT,
    nominee_preview,
    render_invite_email,
    render_winner_summary_email,
    winner_cell,
    winner_ids,
)


def location(name, code, total_votes=0, winner=None):
    return {"location_id": f"loc_{code}", "name": name, "code": code, "total_votes": total_votes, "winner": winner}


def winner(emp_id, first, last, code):
    return {"id": emp_id, "first_name": first, "last_name": last, "employee_code": code}


class TestNomineePreview:
    def test_limit_and_remainder(self, world):
        nominees = [world.ana, world.ben, world.chloe, world.dev]

        names, remaining = nominee_preview(nominees, 3)

        assert names == ["Ana Ruiz (E100)", "Ben Okafor (E101)", "Chloe Nguyen (E102)"]
        assert remaining == 1

    def test_zero_limit(self, world):
        names, remaining = nominee_preview([world.ana], 0)
        assert names == []
        assert remaining == 1


class TestInviteEmail:
    def test_content(self, world):
        message = render_invite_email(
            org_name="Munchies",
            cycle_name="March Stars",
            voter=world.ana,
            nominees=[world.ana, world.ben, world.chloe, world.dev, world.erin],
            link="https://vote.example.com/vote/cyc_1/invite/tok",
        )

        assert message.subject == "Voting invite: March Stars"
        assert "and 2 others" in message.html
        assert "and 2 others" in message.text
        assert "https://vote.example.com/vote/cyc_1/invite/tok" in message.html
        assert message.html.index("Nominees for this cycle") < message.html.index("Open voting page")

    def test_names_are_escaped(self, world):
        voter = make_employee("<b>Eve</b>", "Smith", "E300", [world.downtown], "eve@example.com")

        message = render_invite_email("Munchies", "Q&A Cycle", voter, [], "https://x/y")

        assert "<b>Eve</b>" not in message.html
        assert "&lt;b&gt;Eve&lt;/b&gt;" in message.html
        assert "Q&amp;A Cycle" in message.html
        assert "Nominees for this cycle" not in message.html


class TestWinnerCell:
    def test_winner(self):
        assert winner_cell(location("Downtown", "DT01", 3, winner("emp_1", "Ana", "Ruiz", "E100"))) == (
            "Ana Ruiz (E100)",
            False,
        )

    def test_no_votes(self):
        assert winner_cell(location("Downtown", "DT01", 0)) == (NO_VOTES_TEXT, True)

    def test_pending(self):
        assert winner_cell(location("Downtown", "DT01", 4)) == (PENDING_TEXT, True)


class TestWinnerSummaryEmail:
    def test_table_and_congratulations(self):
        locations = [
            location("Downtown", "DT01", 3, winner("emp_1", "Ana", "Ruiz", "E100")),
            location("Airport", "AP02", 2),
            location("Harbor", "HB03", 0),
        ]

        message = render_winner_summary_email("Munchies", "March Stars", "Ana Ruiz", locations, is_winner=True)

        assert message.subject == "Vote results: March Stars"
        assert "Congratulations!" in message.html
        assert "Downtown (DT01): Ana Ruiz (E100)" in message.text
        assert f"Airport (AP02): {PENDING_TEXT}" in message.text
        assert f"Harbor (HB03): {NO_VOTES_TEXT}" in message.text

    def test_blank_name_and_custom_subject(self):
        message = render_winner_summary_email(
            "Munchies", "March Stars", "  ", [], is_winner=False, subject="Vote results (DT01): March Stars"
        )

        assert message.text.startswith("Hi there,")
        assert message.subject == "Vote results (DT01): March Stars"
        assert "Congratulations" not in message.html

    def test_winner_ids(self):
        locations = [
            location("Downtown", "DT01", 3, winner("emp_1", "Ana", "Ruiz", "E100")),
            location("Airport", "AP02", 2),
        ]
        assert winner_ids(locations) == {"emp_1"}
