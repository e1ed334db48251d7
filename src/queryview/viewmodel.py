"""State and commands of the live query list

The view model is the only owner of the view state. Everything runs on one
asyncio event loop: poll completions, debounce timers and user commands are
handled one at a time, so no locking is needed.
"""

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from queryview.exceptions import TransportFailure
from queryview.filtering import ViewCriteria
from queryview.model import QueryInfo
from queryview.predicates import ErrorTypeFilter, SortOrder, SortType, StateFilter
from queryview.reconcile import ReconcileMode, choose_mode, reconcile, rederive
from queryview.scheduling import ScheduledTask
from queryview.settings import ViewSettings
from queryview.source import QuerySource

logger = logging.getLogger("queryview.viewmodel")


class ViewStatus(enum.Enum):
    """What the renderer should show"""

    #: The first poll has not completed yet
    LOADING = "loading"

    #: Some queries are displayed
    POPULATED = "populated"

    #: Queries exist but none matches the filters
    NO_MATCHES = "no-matches"

    #: The coordinator has no queries
    EMPTY = "empty"

    #: Nothing to show and the last poll failed
    LOAD_ERROR = "load-error"


@dataclass
class ViewState:
    all_records: List[QueryInfo] = field(default_factory=list)
    displayed_records: List[QueryInfo] = field(default_factory=list)
    state_filters: Set[StateFilter] = field(default_factory=set)
    error_type_filters: Set[ErrorTypeFilter] = field(default_factory=set)
    search_text: str = ""
    sort_type: SortType = SortType.CREATED
    sort_order: SortOrder = SortOrder.DESCENDING
    max_displayed: int = 100
    reorder_interval: float = 5.0
    last_refresh: float = 0.0
    last_reorder: float = 0.0
    initialized: bool = False
    last_error: Optional[str] = None

    @staticmethod
    def from_settings(settings: ViewSettings, now: float) -> "ViewState":
        return ViewState(
            state_filters=set(settings.state_filters),
            error_type_filters=set(settings.error_type_filters),
            sort_type=settings.sort,
            sort_order=settings.sort_order,
            max_displayed=settings.max_displayed,
            reorder_interval=settings.reorder_interval,
            last_refresh=now,
            last_reorder=now,
        )

    @property
    def criteria(self) -> ViewCriteria:
        return ViewCriteria(
            state_filters=frozenset(self.state_filters),
            error_type_filters=frozenset(self.error_type_filters),
            search_text=self.search_text,
            sort_type=self.sort_type,
            sort_order=self.sort_order,
        )


Listener = Callable[["QueryListViewModel"], None]


class QueryListViewModel:
    """Polls a query source and maintains the displayed list

    Call :meth:`start` when the view is mounted and :meth:`stop` when it is
    unmounted. Renderers register with :meth:`add_listener` and read
    :attr:`state` (and :attr:`status`) when notified.
    """

    def __init__(
        self,
        source: QuerySource,
        settings: Optional[ViewSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.settings = settings or ViewSettings()
        self.clock = clock
        self.state = ViewState.from_settings(self.settings, clock())
        self.listeners: List[Listener] = []

        self._poll_timer = ScheduledTask(self._poll_cycle)
        self._search_timer = ScheduledTask(self.execute_search)
        self._running = False

    # --- Listeners

    def add_listener(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self.listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self.listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Error in view listener %s", listener)

    @property
    def status(self) -> ViewStatus:
        state = self.state
        if state.displayed_records:
            return ViewStatus.POPULATED
        if not state.initialized:
            return ViewStatus.LOADING
        if state.last_error is not None:
            return ViewStatus.LOAD_ERROR
        if state.all_records:
            return ViewStatus.NO_MATCHES
        return ViewStatus.EMPTY

    @property
    def running(self) -> bool:
        return self._running

    # --- Poll cycle

    def start(self) -> None:
        """Starts polling (the first poll happens right away)"""
        if self._running:
            return
        logger.info("Start polling %s", self.source)
        self._running = True
        self._poll_timer.schedule(0)

    def stop(self) -> None:
        """Stops polling and drops any pending search"""
        if self._running:
            logger.info("Stop polling %s", self.source)
        self._running = False
        self._poll_timer.cancel()
        self._search_timer.cancel()

    async def _poll_cycle(self) -> None:
        try:
            await self.poll()
        except Exception:
            logger.exception("Unexpected error while refreshing queries")
        finally:
            # Fixed delay after completion: slow responses slow down polling
            if self._running:
                self._poll_timer.schedule(self.settings.poll_interval)

    async def poll(self) -> None:
        """Fetches the collection once and updates the displayed list"""
        try:
            records = await self.source.fetch_all()
        except TransportFailure as e:
            logger.warning("Could not refresh queries: %s", e)
            self.state.initialized = True
            self.state.last_error = str(e)
            self._notify()
            return

        state = self.state
        now = self.clock()
        mode = choose_mode(now, state.last_reorder, state.reorder_interval)
        state.displayed_records = reconcile(
            state.displayed_records,
            records,
            state.criteria,
            state.max_displayed,
            mode,
        )
        state.all_records = records
        state.last_refresh = now
        if mode == ReconcileMode.REORDER:
            state.last_reorder = now
        state.initialized = True
        state.last_error = None
        self._notify()

    # --- User commands

    def _rederive(self) -> None:
        state = self.state
        state.displayed_records = rederive(
            state.all_records, state.criteria, state.max_displayed
        )
        self._notify()

    def set_search_text(self, text: str) -> None:
        """Records the search text; the list is updated once typing settles"""
        self.state.search_text = text
        self._search_timer.schedule(self.settings.search_debounce)

    def execute_search(self) -> None:
        self._search_timer.cancel()
        logger.debug("Searching for %r", self.state.search_text)
        self._rederive()

    def toggle_state_filter(self, state_filter: StateFilter) -> None:
        self.state.state_filters ^= {state_filter}
        self._rederive()

    def toggle_error_type_filter(self, error_type: ErrorTypeFilter) -> None:
        self.state.error_type_filters ^= {error_type}
        self._rederive()

    def sort_by(self, sort_type: SortType) -> None:
        """Selects a sort column

        Selecting the current column flips the order; another column is
        sorted in descending order first.
        """
        state = self.state
        if state.sort_type == sort_type:
            state.sort_order = state.sort_order.flipped()
        else:
            state.sort_type = sort_type
            state.sort_order = SortOrder.DESCENDING
        self._rederive()

    def set_reorder_interval(self, interval: float) -> None:
        if interval < 0:
            raise ValueError(f"Invalid reorder interval {interval}")
        self.state.reorder_interval = interval
        self._rederive()

    def set_max_displayed(self, max_displayed: int) -> None:
        if max_displayed < 0:
            raise ValueError(f"Invalid maximum number of queries {max_displayed}")
        self.state.max_displayed = max_displayed
        self._rederive()
