# ruff: noqa: I001
"""CLI for the ``amazon_wrapped`` package.

A Typer-based console interface over the parse → normalize → aggregate
pipeline. The root callback loads a local ``.env`` with ``python-dotenv`` and
configures logging before any subcommand runs; business logic lives in
:mod:`amazon_wrapped.stats` and :mod:`amazon_wrapped.storage`.

User-facing failures are printed as ``Error: ...`` on stderr with exit code 1.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, NoReturn

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo, OptionInfo

from .logging_setup import configure_logging, get_logger
from .models import CalculateStatsResult, ParsedFile, WrappedStats, as_plain

if TYPE_CHECKING:
    from .explore import Page


logger = get_logger("amazon_wrapped.cli")


# ---- Small module-level helpers used by CLI commands -------------------------


def _fail(message: str) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)
    raise typer.Exit(1)


def _load_files(paths: list[Path]) -> list[ParsedFile]:
    """Tokenize ``paths``; a missing path or an empty batch is a user error."""

    from .parsing import parse_files

    missing = [str(p) for p in paths if not p.is_file()]
    if missing:
        _fail(f"File not found: {', '.join(missing)}")

    files = parse_files(paths, logger=logger)
    if not files:
        _fail("none of the given files could be read as CSV")
    return files


def _print_summary(stats: WrappedStats, year: int) -> None:
    from .explore import (
        format_currency,
        format_decimal,
        format_number,
        format_percent,
    )

    cur = stats.primary_currency
    lines = [
        f"Amazon Wrapped {year}",
        "",
        f"Net spend:          {format_currency(stats.net_spend, cur)}",
        f"Gross spend:        {format_currency(stats.total_gross_spend, cur)}",
        f"Refunds:            {format_currency(stats.total_refunds, cur)}",
        f"Monthly average:    {format_currency(stats.monthly_average, cur)}",
        f"Orders:             {format_number(stats.total_orders)}"
        f" ({format_number(stats.retail_orders)} retail,"
        f" {format_number(stats.digital_orders)} digital)",
        f"Items:              {format_number(stats.total_items)}",
        f"Orders per day:     {format_decimal(stats.orders_per_day)}",
        f"Peak month:         {stats.peak_month.month}"
        f" ({format_currency(stats.peak_month.amount, cur)})",
        f"Favorite day:       {stats.favorite_day.day}"
        f" ({format_number(stats.favorite_day.count)} orders)",
        f"Books:              {format_number(stats.book_count)}"
        f" ({format_number(stats.kindle_book_count)} Kindle,"
        f" {format_number(stats.physical_book_count)} physical)",
        f"Returns:            {format_number(stats.return_count)}"
        f" ({format_percent(stats.return_rate)} of orders)",
    ]
    if stats.top_items:
        lines.append("")
        lines.append("Top items:")
        lines.extend(f"  {item.count:>4}  {item.name}" for item in stats.top_items)
    if stats.has_mixed_currencies:
        others = ", ".join(
            f"{e.currency} ({e.order_count})"
            for e in stats.currency_breakdown
            if e.currency != cur
        )
        lines.append("")
        lines.append(f"Note: totals only include {cur} orders; also found {others}.")
    print("\n".join(lines))


def _emit(result: CalculateStatsResult, year: int, *, as_json: bool) -> None:
    if as_json:
        payload = {"year": year, "stats": as_plain(result.stats)}
        print(json.dumps(payload, indent=2))
    else:
        _print_summary(result.stats, year)


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Year-in-review statistics from Amazon order history exports "
        "(Retail.OrderHistory, Digital Items, Refund Payments CSVs)."
    ),
)


# Module-level argument/option objects to satisfy ruff B008 (no calls in
# parameter defaults).
FILES_ARGUMENT: ArgumentInfo = typer.Argument(
    ...,
    help="One or more Amazon export CSV files.",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
YEAR_OPTION: OptionInfo = typer.Option(
    help="Calendar year to summarize (defaults to the latest year present)."
)


@app.command("wrapped")
def wrapped_cmd(
    files: Annotated[list[Path], FILES_ARGUMENT],
    year: Annotated[int | None, YEAR_OPTION] = None,
    *,
    save: bool = typer.Option(True, "--save/--no-save", help="Save the computed bundle."),
    as_json: bool = typer.Option(False, "--json", help="Print the stats as JSON."),
) -> None:
    """Compute the yearly snapshot for the given export files."""

    from .stats import (
        calculate_stats_with_data,
        default_target_year,
        get_available_years,
    )
    from .storage import save_bundle

    parsed = _load_files(files)
    target_year = year if year is not None else default_target_year(get_available_years(parsed))

    result = calculate_stats_with_data(parsed, target_year, logger=logger)
    if not result.all_orders and not result.all_refunds:
        _fail("no Amazon orders or refunds found in the given files")

    if save:
        try:
            dropped = save_bundle(result, target_year=target_year, logger=logger)
        except OSError as e:
            _fail(f"failed to save bundle: {e}")
        if dropped:
            logger.info("cli:saved_trimmed dropped=%s", ",".join(dropped))

    _emit(result, target_year, as_json=as_json)


@app.command("years")
def years_cmd(files: Annotated[list[Path], FILES_ARGUMENT]) -> None:
    """List the calendar years present in the export files, newest first."""

    from .stats import get_available_years

    years = get_available_years(_load_files(files))
    if not years:
        _fail("no dated orders or refunds found in the given files")
    for y in years:
        print(y)


@app.command("yearly")
def yearly_cmd(
    files: Annotated[list[Path], FILES_ARGUMENT],
    *,
    as_json: bool = typer.Option(False, "--json", help="Print the rollup as JSON."),
) -> None:
    """Print per-year totals across every year present."""

    from .explore import format_currency, format_number
    from .stats import calculate_yearly_data

    rollup = calculate_yearly_data(_load_files(files))
    if as_json:
        rows = [
            {
                "year": y.year,
                "total_spend": y.total_spend,
                "order_count": y.order_count,
                "primary_currency": y.primary_currency,
            }
            for y in rollup
        ]
        print(json.dumps(rows, indent=2))
        return
    for y in rollup:
        spend = format_currency(y.total_spend, y.primary_currency or "USD")
        print(f"{y.year}\t{spend}\t{format_number(y.order_count)} order lines")


def _load_saved(year: int | None) -> tuple[CalculateStatsResult, int]:
    """Saved snapshot for ``year`` (default: the year it was saved for).

    A different year is recomputed from the saved ``all_orders``/``all_refunds``.
    """

    from .stats import (
        default_target_year,
        get_available_years_from_orders,
        recalculate_stats_for_year,
    )
    from .storage import load_bundle_file

    bundle = load_bundle_file(logger=logger)
    if bundle is None:
        _fail("no saved bundle; run 'amazon-wrapped wrapped FILES...' first")

    result = bundle.to_result()
    has_all_years = bool(result.all_orders or result.all_refunds)
    saved_year = bundle.target_year
    if saved_year is None and year is None:
        # No recorded year: rebuild for the latest year in the data.
        if not has_all_years:
            _fail("the saved bundle does not record its year; re-run 'wrapped' with --year")
        year = default_target_year(
            get_available_years_from_orders(result.all_orders, result.all_refunds)
        )

    if year is not None and year != saved_year:
        if not has_all_years:
            _fail(
                "the saved bundle was trimmed and no longer holds every year; "
                "re-run 'wrapped' with --year instead"
            )
        result = recalculate_stats_for_year(
            result.all_orders, result.all_refunds, year, logger=logger
        )
        return result, year
    return result, saved_year


def _sort_attr(sort: str, attrs: dict[str, str]) -> str:
    try:
        return attrs[sort]
    except KeyError:
        _fail(f"unknown sort key '{sort}' (choose from: {', '.join(attrs)})")


def _print_page_footer(page: Page[Any], noun: str) -> None:
    print(f"Page {page.page} of {max(page.total_pages, 1)} ({page.total} {noun})")


@app.command("show")
def show_cmd(
    year: Annotated[int | None, YEAR_OPTION] = None,
    *,
    as_json: bool = typer.Option(False, "--json", help="Print the stats as JSON."),
) -> None:
    """Show the saved snapshot, optionally switched to another year."""

    result, shown_year = _load_saved(year)
    _emit(result, shown_year, as_json=as_json)


_ORDER_SORT_KEYS = {"date": "order_date", "amount": "total_owed", "name": "product_name"}
_REFUND_SORT_KEYS = {"date": "refund_date", "amount": "amount_refunded", "name": "product_name"}


@app.command("orders")
def orders_cmd(
    year: Annotated[int | None, YEAR_OPTION] = None,
    *,
    search: str = typer.Option("", "--search", help="Filter by product name or order id."),
    sort: str = typer.Option("date", "--sort", help="Sort by date, amount, or name."),
    ascending: bool = typer.Option(False, "--asc", help="Sort ascending (default descending)."),
    page: int = typer.Option(1, "--page", help="Page number (1-based)."),
) -> None:
    """List the saved year's order lines as a paginated table."""

    from .config import LIMITS
    from .explore import filter_orders, format_currency, format_table_date, paginate, sort_by

    attr = _sort_attr(sort, _ORDER_SORT_KEYS)
    result, _ = _load_saved(year)
    rows = sort_by(
        filter_orders(result.processed_data.orders, search),
        attr,
        "asc" if ascending else "desc",
    )
    shown = paginate(rows, page, LIMITS.items_per_page)
    for o in shown.items:
        amount = format_currency(o.total_owed, o.currency)
        print(f"{format_table_date(o.order_date):<13} {amount:>10}  {o.order_id}  {o.product_name}")
    _print_page_footer(shown, "order lines")


@app.command("refunds")
def refunds_cmd(
    year: Annotated[int | None, YEAR_OPTION] = None,
    *,
    search: str = typer.Option("", "--search", help="Filter by product name or order id."),
    sort: str = typer.Option("date", "--sort", help="Sort by date, amount, or name."),
    ascending: bool = typer.Option(False, "--asc", help="Sort ascending (default descending)."),
    page: int = typer.Option(1, "--page", help="Page number (1-based)."),
) -> None:
    """List the saved year's refunds as a paginated table."""

    from .config import LIMITS
    from .explore import filter_refunds, format_currency, format_table_date, paginate, sort_by

    attr = _sort_attr(sort, _REFUND_SORT_KEYS)
    result, _ = _load_saved(year)
    rows = sort_by(
        filter_refunds(result.processed_data.enriched_refunds, search),
        attr,
        "asc" if ascending else "desc",
    )
    shown = paginate(rows, page, LIMITS.items_per_page)
    for r in shown.items:
        amount = format_currency(r.amount_refunded, r.currency)
        name = r.product_name or "(order not found)"
        print(f"{format_table_date(r.refund_date):<13} {amount:>10}  {r.order_id}  {name}")
    _print_page_footer(shown, "refunds")


@app.command("clear")
def clear_cmd() -> None:
    """Delete the saved bundle."""

    from .storage import clear_bundle, default_bundle_path

    if clear_bundle():
        print(f"Removed {default_bundle_path()}")
    else:
        print("No saved bundle.")


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
