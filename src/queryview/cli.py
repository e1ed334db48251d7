# flake8: noqa: T201
import asyncio
import logging
import sys
from functools import update_wrapper
from pathlib import Path
from typing import Optional

import click
from termcolor import colored, cprint

import queryview
from queryview.exceptions import ConfigurationError, TransportFailure
from queryview.filtering import ViewCriteria
from queryview.model import QueryState
from queryview.predicates import ErrorTypeFilter, SortOrder, SortType, StateFilter
from queryview.reconcile import rederive
from queryview.settings import Settings, get_settings
from queryview.source import FileQuerySource, HttpQuerySource
from queryview.text import strip_query_text_whitespace

# --- Command line main options
logging.basicConfig(level=logging.INFO)


class RunConfig:
    def __init__(self):
        self.traceback = False
        self.config: Optional[Path] = None

    @property
    def settings(self) -> Settings:
        return get_settings(self.config)


def pass_cfg(f):
    """Pass configuration information"""

    @click.pass_context
    def new_func(ctx, *args, **kwargs):
        return ctx.invoke(f, ctx.obj, *args, **kwargs)

    return update_wrapper(new_func, f)


def make_source(settings: Settings, url: Optional[str], file: Optional[Path], user):
    if file is not None:
        return FileQuerySource(file)
    return HttpQuerySource(
        url or settings.server.url,
        user=user or settings.server.user,
        timeout=settings.server.timeout,
    )


STATE_COLORS = {
    QueryState.QUEUED: "cyan",
    QueryState.FINISHED: "blue",
    QueryState.FAILED: "red",
}

source_options = [
    click.option("--url", default=None, help="Coordinator URL (overrides settings)"),
    click.option(
        "--file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="Read queries from a JSON file instead of the coordinator",
    ),
    click.option("--user", default=None, help="User name sent to the coordinator"),
]


def with_source_options(f):
    for option in reversed(source_options):
        f = option(f)
    return f


@click.group()
@click.option("--quiet", is_flag=True, help="Be quiet")
@click.option("--debug", is_flag=True, help="Be even more verbose (implies traceback)")
@click.option(
    "--traceback", is_flag=True, help="Display traceback if an exception occurs"
)
@click.option(
    "--config",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: ~/.config/queryview/settings.yaml)",
)
@click.pass_context
def cli(ctx, quiet, debug, traceback, config):
    if quiet:
        logging.getLogger().setLevel(logging.WARN)
    elif debug:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.obj = RunConfig()
    ctx.obj.traceback = traceback or debug
    ctx.obj.config = config


@cli.command(help="Get version")
def version():
    print(queryview.__version__)


@with_source_options
@cli.command()
@pass_cfg
def watch(cfg: RunConfig, url, file, user):
    """Live view of the queries"""
    from queryview.tui import QueryListApp
    from queryview.viewmodel import QueryListViewModel

    try:
        settings = cfg.settings
    except ConfigurationError as e:
        cprint(str(e), "red", file=sys.stderr)
        sys.exit(1)

    source = make_source(settings, url, file, user)
    view_model = QueryListViewModel(source, settings.view)
    QueryListApp(view_model).run()


@with_source_options
@click.option(
    "--state",
    "states",
    multiple=True,
    type=click.Choice([f.name for f in StateFilter], case_sensitive=False),
    help="State filter (can be repeated, defaults to the settings)",
)
@click.option(
    "--error",
    "errors",
    multiple=True,
    type=click.Choice([f.name for f in ErrorTypeFilter], case_sensitive=False),
    help="Error type filter (can be repeated, defaults to the settings)",
)
@click.option("--search", default="", help="Search text")
@click.option(
    "--sort",
    type=click.Choice([s.name for s in SortType], case_sensitive=False),
    default=None,
    help="Sort key",
)
@click.option("--ascending", is_flag=True, help="Sort in ascending order")
@click.option(
    "--max",
    "max_count",
    type=click.IntRange(min=0),
    default=None,
    help="0 to show all",
)
@cli.command(name="list")
@pass_cfg
def list_queries(
    cfg: RunConfig,
    url,
    file,
    user,
    states,
    errors,
    search: str,
    sort: Optional[str],
    ascending: bool,
    max_count: Optional[int],
):
    """Fetch the queries once and print the filtered list"""
    try:
        settings = cfg.settings
    except ConfigurationError as e:
        cprint(str(e), "red", file=sys.stderr)
        sys.exit(1)

    view = settings.view
    state_filters = [StateFilter[s.upper()] for s in states] or view.state_filters
    error_type_filters = [
        ErrorTypeFilter[e.upper()] for e in errors
    ] or view.error_type_filters
    criteria = ViewCriteria(
        state_filters=frozenset(state_filters),
        error_type_filters=frozenset(error_type_filters),
        search_text=search,
        sort_type=SortType[sort.upper()] if sort else view.sort,
        sort_order=SortOrder.ASCENDING if ascending else view.sort_order,
    )

    source = make_source(settings, url, file, user)

    async def fetch():
        try:
            return await source.fetch_all()
        finally:
            await source.aclose()

    try:
        records = asyncio.run(fetch())
    except TransportFailure as e:
        if cfg.traceback:
            logging.exception("Could not fetch queries")
        cprint(f"Could not fetch queries: {e}", "red", file=sys.stderr)
        sys.exit(1)

    displayed = rederive(
        records,
        criteria,
        view.max_displayed if max_count is None else max_count,
    )
    for record in displayed:
        state = colored(
            f"{record.state.value:12}", STATE_COLORS.get(record.state, "yellow")
        )
        text = strip_query_text_whitespace(record.query, 80).replace("\n", " ")
        print(
            f"{state} {record.query_id:30} {record.session.user or '-':12}"
            f" {record.stats.elapsed_time or '-':>10}  {text}"
        )

    print(f"{len(displayed)} of {len(records)} queries")


def main():
    cli(obj=None)
