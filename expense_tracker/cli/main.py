"""Command-line interface for managing and serving the expense store."""

from __future__ import annotations

import argparse
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path

from expense_tracker import __version__, crud, schemas
from expense_tracker.config import Settings, load_settings
from expense_tracker.database import Database
from expense_tracker.errors import ExpenseTrackerError
from expense_tracker.logging import configure_cli_logging

DESCRIPTION = "Personal expense tracker"
PREFIX = "[expense-tracker]"


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:  # pragma: no cover - argparse validation
        raise argparse.ArgumentTypeError("Expected YYYY-MM-DD date format") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="expense-tracker", description=DESCRIPTION)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--json-logs", action="store_true", help="Also write JSON log lines")
    parser.add_argument("--log-level", help="Log level name (DEBUG, INFO, ...)")
    subparsers = parser.add_subparsers(dest="cmd", required=True)

    init_db = subparsers.add_parser("init-db", help="Create tables and seed default categories")
    init_db.add_argument(
        "--with-samples",
        action="store_true",
        help="Insert the demo expenses when the expense table is empty",
    )

    listing = subparsers.add_parser("list", help="Print stored expenses, newest first")
    listing.add_argument("--category", help="Exact category name to filter on")
    listing.add_argument("--date", type=_parse_date, help="Exact expense date (YYYY-MM-DD)")

    subparsers.add_parser("summary", help="Print totals per category")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Interface to bind (default from config)")
    serve.add_argument("--port", type=int, help="Port to bind (default from config)")
    return parser


def _handle_init_db(settings: Settings, args: argparse.Namespace) -> None:
    if args.with_samples:
        settings = replace(settings, seed_samples=True)
    with Database.from_settings(settings) as database:
        with database.session_scope() as session:
            categories = crud.list_category_names(session)
            expenses = crud.list_expenses(session)
    print(f"{PREFIX} init-db url={settings.database_url} categories={len(categories)} expenses={len(expenses)}")


def _handle_list(settings: Settings, args: argparse.Namespace) -> None:
    filters = schemas.ExpenseFilter(category=args.category or None, date=args.date)
    with Database.from_settings(settings) as database:
        with database.session_scope() as session:
            rows = [schemas.ExpenseRead.model_validate(item) for item in crud.list_expenses(session, filters)]
    for row in rows:
        print(f"{row.id:>5}  {row.date.isoformat()}  {row.amount:>10}  {row.category:<15} {row.description}")
    print(f"{PREFIX} list count={len(rows)}")


def _handle_summary(settings: Settings, args: argparse.Namespace) -> None:
    with Database.from_settings(settings) as database:
        with database.session_scope() as session:
            rows = crud.summarize_by_category(session)
    for row in rows:
        print(f"{row.category:<15} {row.total:>10}")
    print(f"{PREFIX} summary categories={len(rows)}")


def _handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    from expense_tracker.server import create_app

    host = args.host or settings.host
    port = args.port or settings.port
    app = create_app(settings=settings)
    print(f"{PREFIX} serve http://{host}:{port}/api")
    uvicorn.run(app, host=host, port=port, log_config=None)


HANDLERS = {
    "init-db": _handle_init_db,
    "list": _handle_list,
    "summary": _handle_summary,
    "serve": _handle_serve,
}


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ExpenseTrackerError as exc:
        raise SystemExit(f"{PREFIX} {exc}") from exc
    configure_cli_logging(
        json_logs=bool(args.json_logs or settings.json_logs),
        level=args.log_level or settings.log_level,
    )
    try:
        HANDLERS[args.cmd](settings, args)
    except ExpenseTrackerError as exc:
        raise SystemExit(f"{PREFIX} {args.cmd} failed: {exc}") from exc


if __name__ == "__main__":
    main()
