"""Queries-related widgets for the TUI"""

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import DataTable, Input, Static
from textual.widgets.data_table import CellDoesNotExist

from queryview.predicates import (
    MAX_DISPLAYED_CHOICES,
    REORDER_INTERVALS,
    SortType,
)
from queryview.tui.utils import placeholder_label, query_row
from queryview.viewmodel import QueryListViewModel, ViewStatus


class StatusLine(Static):
    """Active filters, sort and refresh settings"""

    def update_view(self, view_model: QueryListViewModel) -> None:
        state = view_model.state
        filters = [f.label for f in state.state_filters]
        filters += [f.label for f in state.error_type_filters]
        reorder = dict(REORDER_INTERVALS).get(
            state.reorder_interval, f"{state.reorder_interval:g}s"
        )
        maximum = dict(MAX_DISPLAYED_CHOICES).get(
            state.max_displayed, f"{state.max_displayed} queries"
        )
        self.update(
            f"Filters: {', '.join(sorted(filters)) or 'none'}"
            f" | Sort: {state.sort_type.label} {state.sort_order.arrow}"
            f" | Reorder: {reorder} | Show: {maximum}"
            f" | {len(state.displayed_records)}/{len(state.all_records)} queries"
        )


class QueriesTable(Vertical):
    """Search box and table of the displayed queries"""

    COLUMN_LABELS = {
        "query_id": "ID",
        "state": "State",
        "user": "User",
        "source": "Source",
        "elapsed": "Elapsed",
        "cpu": "CPU",
        "memory": "Memory",
        "cumulative": "Cumul. memory",
        "progress": "Progress",
        "query": "Query",
    }

    # Columns that support sorting (column key -> sort type)
    SORTABLE_COLUMNS = {
        "elapsed": SortType.ELAPSED,
        "cpu": SortType.CPU,
        "memory": SortType.CURRENT_MEMORY,
        "cumulative": SortType.CUMULATIVE_MEMORY,
    }

    def __init__(self, view_model: QueryListViewModel) -> None:
        super().__init__()
        self.view_model = view_model

    def compose(self) -> ComposeResult:
        yield Input(
            placeholder="Search: user, source, query ID, state, resource group or text",
            id="search-input",
        )
        yield StatusLine("", id="status-line")
        yield Static("", id="placeholder")
        yield DataTable(id="queries-table")

    def on_mount(self) -> None:
        table = self.query_one("#queries-table", DataTable)
        for key, label in self.COLUMN_LABELS.items():
            table.add_column(label, key=key)
        table.cursor_type = "row"
        table.zebra_stripes = True
        self.view_model.add_listener(self.update_view)
        self.update_view(self.view_model)

    def on_unmount(self) -> None:
        if self.update_view in self.view_model.listeners:
            self.view_model.remove_listener(self.update_view)

    def on_input_changed(self, event: Input.Changed) -> None:
        self.view_model.set_search_text(event.value)

    def on_data_table_header_selected(self, event: DataTable.HeaderSelected) -> None:
        """Handle column header click for sorting"""
        col_key = str(event.column_key.value) if event.column_key else None
        if col_key in self.SORTABLE_COLUMNS:
            self.view_model.sort_by(self.SORTABLE_COLUMNS[col_key])

    def _update_column_headers(self) -> None:
        state = self.view_model.state
        table = self.query_one("#queries-table", DataTable)
        for column in table.columns.values():
            col_key = str(column.key.value) if column.key else None
            if col_key not in self.COLUMN_LABELS:
                continue
            label = self.COLUMN_LABELS[col_key]
            if self.SORTABLE_COLUMNS.get(col_key) == state.sort_type:
                label = f"{label} {state.sort_order.arrow}"
            column.label = label

    def update_view(self, view_model: QueryListViewModel) -> None:
        """Redraws the table from the view model"""
        state = view_model.state
        self.query_one("#status-line", StatusLine).update_view(view_model)

        placeholder = self.query_one("#placeholder", Static)
        status = view_model.status
        if status == ViewStatus.POPULATED:
            placeholder.display = False
        else:
            placeholder.update(placeholder_label(status, state.last_error))
            placeholder.display = True

        table = self.query_one("#queries-table", DataTable)
        self._update_column_headers()

        # Keep the cursor on the same query across refreshes
        selected = None
        if table.row_count:
            try:
                row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
                selected = row_key.value
            except CellDoesNotExist:
                pass

        table.clear()
        for index, record in enumerate(state.displayed_records):
            table.add_row(*query_row(record), key=record.query_id)
            if record.query_id == selected:
                table.move_cursor(row=index)
