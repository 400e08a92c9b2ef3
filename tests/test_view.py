"""Tests for screen rendering and callback data parsing."""

from datetime import date, timedelta

import pytest

from streakly.models import MAX_NAME_LENGTH, Habit
from streakly.view import (
    HABITS_PER_PAGE, TEXT_LIMIT, Action, header_date, page_count, parse_action,
    render_add_prompt, render_confirm_delete, render_screen,
)

TODAY = date(2024, 1, 13)  # Saturday


def _habit(hid, name, days=()):
    return Habit(id=hid, name=name, created_at=date(2024, 1, 1), completed_dates=set(days))


class TestRenderScreen:
    def test_empty_state(self):
        screen = render_screen([], TODAY)
        assert "No habits yet" in screen.text
        assert "Start building good habits today!" in screen.text
        assert "0 Total Habits · 0 Done Today · 0 Best Streak" in screen.text
        assert [[b.data for b in row] for row in screen.buttons] == [["add"]]

    def test_header(self):
        screen = render_screen([], TODAY)
        assert screen.text.startswith("Habit Tracker\nSaturday, January 13")

    def test_habit_rows(self):
        h = _habit("h1", "Drink Water", [TODAY, TODAY - timedelta(days=1)])
        screen = render_screen([h], TODAY)
        assert "Drink Water" in screen.text
        assert "🔥 2 day streak" in screen.text
        assert "1 Total Habits · 1 Done Today · 2 Best Streak" in screen.text

        delete_row, day_row, add_row = screen.buttons
        assert delete_row[0].data == "d:h1"
        assert len(day_row) == 7
        assert day_row[-1].data == "t:h1:2024-01-13"
        assert day_row[0].data == "t:h1:2024-01-07"
        assert day_row[-1].label == "✅S13"
        assert day_row[-2].label == "✅F12"
        assert day_row[0].label == "S7"
        assert add_row[0].data == "add"

    def test_today_marked_when_not_done(self):
        screen = render_screen([_habit("h1", "Read")], TODAY)
        assert screen.buttons[1][-1].label == "[S13]"

    def test_callback_data_fits_telegram_limit(self):
        h = _habit("f" * 32, "Read")
        screen = render_screen([h], TODAY)
        assert all(len(b.data.encode()) <= 64 for row in screen.buttons for b in row)


class TestDialogs:
    def test_confirm_delete(self):
        screen = render_confirm_delete(_habit("h1", "Read"))
        assert "Are you sure you want to delete this habit?" in screen.text
        assert [b.data for b in screen.buttons[0]] == ["dn", "dy:h1"]

    def test_add_prompt(self):
        screen = render_add_prompt()
        assert screen.text.startswith("New Habit")
        assert screen.buttons[0][0].data == "dn"


def test_header_date():
    assert header_date(date(2026, 10, 19)) == "Monday, October 19"


class TestParseAction:
    @pytest.mark.parametrize("data,expected", [
        ("add", Action("add")),
        ("dn", Action("cancel")),
        ("d:abc", Action("ask_delete", habit_id="abc")),
        ("dy:abc", Action("delete", habit_id="abc")),
        ("t:abc:2024-01-13", Action("toggle", habit_id="abc", day=TODAY)),
    ])
    def test_valid(self, data, expected):
        assert parse_action(data) == expected

    @pytest.mark.parametrize("data", ["", None, "x", "d:", "t:abc", "t:abc:notadate", "add:1"])
    def test_invalid(self, data):
        assert parse_action(data) is None


class TestSizeLimits:
    def test_long_stored_name_fits(self):
        screen = render_screen([_habit("h1", "x" * 5000)], TODAY)
        assert len(screen.text) <= TEXT_LIMIT
        assert "x" * MAX_NAME_LENGTH not in screen.text
        assert len(screen.buttons[0][0].label) <= MAX_NAME_LENGTH + 2

    def test_many_long_names_fit(self):
        habits = [_habit(f"h{i}", f"{i}" + "y" * 200) for i in range(40)]
        screen = render_screen(habits, TODAY)
        assert len(screen.text) <= TEXT_LIMIT

    def test_confirm_delete_shortens_name(self):
        screen = render_confirm_delete(_habit("h1", "z" * 5000))
        assert len(screen.text) < 200

    def test_button_count_bounded(self):
        habits = [_habit(f"h{i}", f"habit {i}") for i in range(24)]
        for page in range(page_count(len(habits))):
            screen = render_screen(habits, TODAY, page=page)
            assert sum(len(row) for row in screen.buttons) <= 100


class TestPaging:
    def _habits(self, n):
        return [_habit(f"h{i}", f"habit {i}") for i in range(n)]

    def test_single_page_has_no_nav(self):
        screen = render_screen(self._habits(HABITS_PER_PAGE), TODAY)
        assert "Page" not in screen.text
        assert not any(b.data.startswith("p:") for row in screen.buttons for b in row)

    def test_pages_split_habits(self):
        habits = self._habits(HABITS_PER_PAGE + 3)
        first = render_screen(habits, TODAY, page=0)
        second = render_screen(habits, TODAY, page=1)
        assert "Page 1/2" in first.text
        assert "Page 2/2" in second.text
        assert f"habit {HABITS_PER_PAGE}" in second.text
        assert "habit 0\n" not in second.text
        assert [b.data for b in first.buttons[-2]] == ["p:1"]
        assert [b.data for b in second.buttons[-2]] == ["p:0"]

    def test_stats_cover_all_pages(self):
        habits = self._habits(HABITS_PER_PAGE + 3)
        screen = render_screen(habits, TODAY, page=1)
        assert f"{HABITS_PER_PAGE + 3} Total Habits" in screen.text

    @pytest.mark.parametrize("page,expected", [(-3, 0), (0, 0), (1, 1), (9, 1)])
    def test_page_clamped(self, page, expected):
        screen = render_screen(self._habits(HABITS_PER_PAGE + 1), TODAY, page=page)
        assert screen.page == expected

    def test_page_count(self):
        assert page_count(0) == 1
        assert page_count(HABITS_PER_PAGE) == 1
        assert page_count(HABITS_PER_PAGE + 1) == 2

    def test_parse_page(self):
        assert parse_action("p:2") == Action("page", page=2)
        assert parse_action("p:-1") is None
        assert parse_action("p:x") is None
