"""Screen rendering — header, stats, per-habit 7-day grid.

Pure: takes a habit snapshot and a reference date, returns text plus a
transport-neutral button grid. Transports decide how to draw buttons.

Habits are shown HABITS_PER_PAGE at a time so the grid stays under
Telegram's inline keyboard size; stats always cover the whole list.

Button callback data:
  t:<habit_id>:<YYYY-MM-DD>   toggle a day
  d:<habit_id>                ask to delete
  dy:<habit_id>               confirm delete
  dn                          cancel delete / close prompt
  add                         open the "New Habit" prompt
  p:<page>                    show another page of habits
"""

from dataclasses import dataclass, field
from datetime import date

from streakly.models import MAX_NAME_LENGTH
from streakly.stats import aggregate, last_7_days, streak

# 8 buttons per habit, plus navigation and add rows
HABITS_PER_PAGE = 8
TEXT_LIMIT = 4096

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_WEEKDAYS_LONG = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class Button:
    label: str
    data: str


@dataclass
class Screen:
    text: str
    buttons: list[list[Button]] = field(default_factory=list)
    page: int = 0


@dataclass(frozen=True)
class Action:
    """A decoded button press."""
    kind: str               # "toggle" | "ask_delete" | "delete" | "cancel" | "add" | "page"
    habit_id: str = ""
    day: date | None = None
    page: int = 0


def header_date(as_of: date) -> str:
    """e.g. "Monday, October 19"."""
    return f"{_WEEKDAYS_LONG[as_of.weekday()]}, {_MONTHS[as_of.month - 1]} {as_of.day}"


def display_name(name: str) -> str:
    """Names stored before the length cap may be longer; shorten for display."""
    if len(name) <= MAX_NAME_LENGTH:
        return name
    return name[:MAX_NAME_LENGTH - 1] + "…"


def page_count(total: int) -> int:
    return max(1, -(-total // HABITS_PER_PAGE))


def _day_label(cell, done: bool, is_today: bool) -> str:
    label = f"{cell.weekday[0]}{cell.day_of_month}"
    if done:
        return f"✅{label}"
    if is_today:
        return f"[{label}]"
    return label


def _fit(text: str) -> str:
    if len(text) <= TEXT_LIMIT:
        return text
    return text[:TEXT_LIMIT - 1] + "…"


def render_screen(habits, as_of: date, page: int = 0) -> Screen:
    stats = aggregate(habits, as_of)
    pages = page_count(len(habits))
    page = min(max(page, 0), pages - 1)
    lines = [
        "Habit Tracker",
        header_date(as_of),
        "",
        f"{stats.total} Total Habits · {stats.completed_today} Done Today · "
        f"{stats.best_streak} Best Streak",
        "",
    ]

    buttons: list[list[Button]] = []
    if not habits:
        lines += ["📅 No habits yet", "Start building good habits today!"]
    else:
        if pages > 1:
            lines += [f"Page {page + 1}/{pages}", ""]
        days = last_7_days(as_of)
        start = page * HABITS_PER_PAGE
        for habit in habits[start:start + HABITS_PER_PAGE]:
            name = display_name(habit.name)
            lines.append(name)
            lines.append(f"🔥 {streak(habit.completed_dates, as_of)} day streak")
            lines.append("")
            buttons.append([Button(f"🗑 {name}", f"d:{habit.id}")])
            buttons.append([
                Button(
                    _day_label(cell, habit.is_completed(cell.date), cell.date == as_of),
                    f"t:{habit.id}:{cell.date.isoformat()}",
                )
                for cell in days
            ])

    if pages > 1:
        nav = []
        if page > 0:
            nav.append(Button("‹ Prev", f"p:{page - 1}"))
        if page < pages - 1:
            nav.append(Button("Next ›", f"p:{page + 1}"))
        buttons.append(nav)

    buttons.append([Button("＋ New Habit", "add")])
    return Screen(text=_fit("\n".join(lines).rstrip()), buttons=buttons, page=page)


def render_confirm_delete(habit) -> Screen:
    return Screen(
        text=f"Delete Habit\n\nAre you sure you want to delete this habit?\n“{display_name(habit.name)}”",
        buttons=[[Button("Cancel", "dn"), Button("Delete", f"dy:{habit.id}")]],
    )


def render_add_prompt() -> Screen:
    return Screen(
        text="New Habit\n\nSend the habit name, or /cancel.",
        buttons=[[Button("Cancel", "dn")]],
    )


def parse_action(data: str) -> Action | None:
    """Decode callback data. Returns None for anything unrecognised."""
    if not data:
        return None
    kind, _, rest = data.partition(":")
    if kind == "add" and not rest:
        return Action("add")
    if kind == "dn" and not rest:
        return Action("cancel")
    if kind == "d" and rest:
        return Action("ask_delete", habit_id=rest)
    if kind == "dy" and rest:
        return Action("delete", habit_id=rest)
    if kind == "p" and rest.isdigit():
        return Action("page", page=int(rest))
    if kind == "t":
        habit_id, _, day = rest.partition(":")
        if not habit_id or not day:
            return None
        try:
            return Action("toggle", habit_id=habit_id, day=date.fromisoformat(day))
        except ValueError:
            return None
    return None
