"""Main Textual TUI application for watching queries"""

import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, Input

from queryview.predicates import (
    MAX_DISPLAYED_CHOICES,
    REORDER_INTERVALS,
    ErrorTypeFilter,
    SortType,
    StateFilter,
)
from queryview.tui.widgets import QueriesTable
from queryview.viewmodel import QueryListViewModel

logger = logging.getLogger("queryview.tui")


def next_choice(choices, current):
    """Value following `current` in a list of (value, label) choices"""
    values = [value for value, _ in choices]
    try:
        return values[(values.index(current) + 1) % len(values)]
    except ValueError:
        return values[0]


class QueryListApp(App):
    """Textual TUI showing the live list of queries"""

    TITLE = "Query list"

    CSS = """
    #status-line {
        height: 1;
        color: $text-muted;
    }
    #placeholder {
        height: 3;
        content-align: center middle;
        text-style: italic;
    }
    #queries-table {
        height: 1fr;
    }
    """

    STATE_KEYS = {
        "r": StateFilter.RUNNING,
        "q": StateFilter.QUEUED,
        "f": StateFilter.FINISHED,
    }

    ERROR_KEYS = {
        "i": ErrorTypeFilter.INTERNAL_ERROR,
        "x": ErrorTypeFilter.EXTERNAL,
        "u": ErrorTypeFilter.USER_ERROR,
        "e": ErrorTypeFilter.INSUFFICIENT_RESOURCES,
    }

    SORT_KEYS = {
        "1": SortType.CREATED,
        "2": SortType.ELAPSED,
        "3": SortType.CPU,
        "4": SortType.EXECUTION,
        "5": SortType.CURRENT_MEMORY,
        "6": SortType.CUMULATIVE_MEMORY,
    }

    BINDINGS = (
        [
            Binding("ctrl+q", "quit", "Quit"),
            Binding("/", "focus_search", "Search"),
            Binding("escape", "focus_table", "Table", show=False),
            Binding("o", "cycle_reorder", "Reorder"),
            Binding("m", "cycle_max", "Max"),
        ]
        + [
            Binding(key, f"toggle_state('{f.name}')", f.label)
            for key, f in STATE_KEYS.items()
        ]
        + [
            Binding(key, f"toggle_error('{f.name}')", f.label, show=False)
            for key, f in ERROR_KEYS.items()
        ]
        + [
            Binding(key, f"sort('{s.name}')", s.label, show=False)
            for key, s in SORT_KEYS.items()
        ]
    )

    def __init__(self, view_model: QueryListViewModel):
        super().__init__()
        self.view_model = view_model

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="main-container"):
            yield QueriesTable(self.view_model)
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = str(self.view_model.source)
        self.view_model.start()
        self.query_one("#queries-table").focus()

    def on_unmount(self) -> None:
        self.view_model.stop()

    def check_action(self, action: str, parameters) -> bool:
        # Letters go to the search box while it has the focus
        if isinstance(self.focused, Input) and action not in (
            "quit",
            "focus_table",
        ):
            return False
        return True

    def action_focus_search(self) -> None:
        self.query_one("#search-input", Input).focus()

    def action_focus_table(self) -> None:
        self.query_one("#queries-table").focus()

    def action_toggle_state(self, name: str) -> None:
        self.view_model.toggle_state_filter(StateFilter[name])

    def action_toggle_error(self, name: str) -> None:
        self.view_model.toggle_error_type_filter(ErrorTypeFilter[name])

    def action_sort(self, name: str) -> None:
        self.view_model.sort_by(SortType[name])

    def action_cycle_reorder(self) -> None:
        interval = next_choice(
            REORDER_INTERVALS, self.view_model.state.reorder_interval
        )
        self.view_model.set_reorder_interval(interval)
        logger.debug("Reorder interval set to %s", interval)

    def action_cycle_max(self) -> None:
        maximum = next_choice(
            MAX_DISPLAYED_CHOICES, self.view_model.state.max_displayed
        )
        self.view_model.set_max_displayed(maximum)
