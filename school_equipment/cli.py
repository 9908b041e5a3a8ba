"""
school-equipment

Purpose:
  Register, move, remove and list school equipment from the command line,
  and move the whole record set in and out as JSON, PDF or HTML.

Database:
  DB_URL (or DATABASE_URL) if set, otherwise the SQLite file at DB_PATH
  (default DATA_DIR/inventory.sqlite3, DATA_DIR defaulting to app_data).
  All of them can come from .env.

Examples:
  school-equipment add --kind table --value 50000 --location H-202 --seats 4
  school-equipment add --kind chair --value 12000 --location HA-123 --chair-kind school
  school-equipment move 7 S-310
  school-equipment list --building H --floor 2 --sort value
  school-equipment export-json backup.json
  school-equipment import-json backup.json --id-policy reassign
  school-equipment report hus-h.pdf --building H

Exit codes:
  0 = success
  1 = handled application error (bad input, unknown id, bad import file)
  2 = storage error (database unreadable or corrupt rows)
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional, Sequence, TextIO

from pydantic import ValidationError

from .core.errors import InventoryError, RecordIntegrityError, StorageError
from .core.kinds import ChairKind, EquipmentKind
from .core.locations import Building, validate_floor
from .core.logging import configure_logging
from .schemas.equipment import SORT_KEYS, EquipmentRecord, sort_records
from .schemas.location import Location
from .services.report_export import write_report
from .services.store import EquipmentStore
from .services.transfer import IdPolicy, export_json, import_json
from .settings import AppSettings, get_settings

EXIT_OK = 0
EXIT_APP_ERROR = 1
EXIT_STORAGE_ERROR = 2


class CommandError(Exception):
    """A user-facing failure that maps to exit code 1."""


def _building(value: str) -> Building:
    try:
        return Building.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _kind(value: str) -> EquipmentKind:
    try:
        return EquipmentKind.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _chair_kind(value: str) -> ChairKind:
    try:
        return ChairKind.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _location(value: str) -> Location:
    try:
        return Location.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _floor(value: str) -> int:
    try:
        return validate_floor(int(value))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Floor must be a single digit 0-9, got {value!r}") from exc


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--building", type=_building, help="Building code or name (HA, H, S).")
    p.add_argument("--floor", type=_floor, help="Floor digit; requires --building.")
    p.add_argument("--room", type=_location, help="Exact room, e.g. H-202.")
    p.add_argument("--kind", type=_kind, help="table, chair or projector.")
    p.add_argument("--sort", choices=sorted(SORT_KEYS), help="Re-sort the listing by this key.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="school-equipment",
        description="Keep track of tables, chairs and projectors across school buildings.",
    )
    p.add_argument("--db-url", default=None, help="Database URL (overrides DB_URL/DB_PATH).")
    sub = p.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Register a new piece of equipment.")
    add.add_argument("--kind", type=_kind, required=True, help="table, chair or projector.")
    add.add_argument("--value", type=int, required=True, help="Value in ISK (non-negative).")
    add.add_argument("--location", type=_location, required=True, help="Location code, e.g. H-202.")
    add.add_argument("--seats", type=int, help="Seat count (tables).")
    add.add_argument("--chair-kind", type=_chair_kind, help="comfort, school, office or other (chairs).")
    add.add_argument("--lumens", type=int, help="Brightness in lumens (projectors).")

    move = sub.add_parser("move", help="Move equipment to another room.")
    move.add_argument("id", type=int)
    move.add_argument("location", type=_location)

    remove = sub.add_parser("remove", help="Delete equipment by id.")
    remove.add_argument("id", type=int)

    show = sub.add_parser("show", help="Show one record.")
    show.add_argument("id", type=int)
    show.add_argument("--json", action="store_true", help="Print the record as JSON.")

    listing = sub.add_parser("list", help="List equipment, optionally filtered.")
    _add_filter_args(listing)
    listing.add_argument("--json", action="store_true", help="Print records as JSON.")

    exp = sub.add_parser("export-json", help="Write every record to a JSON file.")
    exp.add_argument("path")

    imp = sub.add_parser("import-json", help="Replace all records with the contents of a JSON file.")
    imp.add_argument("path")
    imp.add_argument(
        "--id-policy",
        choices=[policy.value for policy in IdPolicy],
        default=None,
        help="Keep the file's ids or issue new ones (default from IMPORT_ID_POLICY).",
    )
    imp.add_argument(
        "--append",
        action="store_true",
        help="Add to the existing records instead of replacing them (implies reassign).",
    )

    report = sub.add_parser("report", help="Write a printable PDF or HTML list.")
    report.add_argument("path")
    report.add_argument("--format", choices=("pdf", "html"), default=None,
                        help="Defaults to the file extension, else pdf.")
    report.add_argument("--title", default=None)
    _add_filter_args(report)
    return p


def select_records(store: EquipmentStore, args: argparse.Namespace) -> tuple[list[EquipmentRecord], str]:
    """Pick the store query matching the filters; returns records and a caption."""

    building = getattr(args, "building", None)
    floor = getattr(args, "floor", None)
    room = getattr(args, "room", None)
    kind = getattr(args, "kind", None)

    if floor is not None and building is None and room is None:
        raise CommandError("--floor needs --building")

    if room is not None:
        records = store.list_by_room(room)
        caption = f"Room {room.display_name}"
    elif building is not None and floor is not None:
        records = store.list_by_floor(building, floor)
        caption = f"{building.display_name}, floor {floor}"
    elif building is not None:
        records = store.list_by_building(building)
        caption = building.display_name
    elif kind is not None:
        records = store.list_by_kind(kind)
        caption = kind.label
        kind = None
    else:
        records = store.list_all()
        caption = "All equipment"

    if kind is not None:
        records = [record for record in records if record.kind is kind]
        caption = f"{caption}, {kind.label}"
    if getattr(args, "sort", None):
        records = sort_records(records, args.sort)
    return records, caption


def _print_records(records: Sequence[EquipmentRecord], as_json: bool, out: TextIO) -> None:
    if as_json:
        payload = [record.model_dump(mode="json") for record in records]
        print(json.dumps(payload, ensure_ascii=False, indent=2), file=out)
        return
    if not records:
        print("No equipment found.", file=out)
    for record in records:
        print(record.describe(), file=out)


def _cmd_add(store: EquipmentStore, args: argparse.Namespace, out: TextIO) -> None:
    try:
        record = EquipmentRecord(
            kind=args.kind,
            value_isk=args.value,
            location=args.location,
            seats=args.seats,
            chair_kind=args.chair_kind,
            lumens=args.lumens,
        )
    except ValidationError as exc:
        messages = "; ".join(err["msg"].removeprefix("Value error, ") for err in exc.errors())
        raise CommandError(messages) from exc
    record_id = store.insert(record)
    print(record.with_id(record_id).describe(), file=out)


def _cmd_move(store: EquipmentStore, args: argparse.Namespace, out: TextIO) -> None:
    if not store.update_location(args.id, args.location):
        raise CommandError(f"No equipment with id {args.id}")
    print(f"Moved #{args.id} to {args.location.display_name}.", file=out)


def _cmd_remove(store: EquipmentStore, args: argparse.Namespace, out: TextIO) -> None:
    if not store.delete(args.id):
        raise CommandError(f"No equipment with id {args.id}")
    print(f"Removed #{args.id}.", file=out)


def _cmd_show(store: EquipmentStore, args: argparse.Namespace, out: TextIO) -> None:
    record = store.get(args.id)
    if record is None:
        raise CommandError(f"No equipment with id {args.id}")
    _print_records([record], args.json, out)


def _cmd_list(store: EquipmentStore, args: argparse.Namespace, out: TextIO) -> None:
    records, _caption = select_records(store, args)
    _print_records(records, args.json, out)


def _cmd_export(store: EquipmentStore, args: argparse.Namespace, out: TextIO) -> None:
    count = export_json(store, args.path)
    print(f"Exported {count} records to {args.path}.", file=out)


def _cmd_import(
    store: EquipmentStore, args: argparse.Namespace, out: TextIO, settings: AppSettings
) -> None:
    policy = IdPolicy.REASSIGN if args.append else IdPolicy(args.id_policy or settings.IMPORT_ID_POLICY)
    count = import_json(store, args.path, id_policy=policy, replace=not args.append)
    print(f"Imported {count} records from {args.path} (ids {policy.value}).", file=out)


def _cmd_report(
    store: EquipmentStore, args: argparse.Namespace, out: TextIO, settings: AppSettings
) -> None:
    fmt = args.format or ("html" if str(args.path).lower().endswith((".html", ".htm")) else "pdf")
    records, caption = select_records(store, args)
    path = write_report(
        args.path,
        records,
        title=args.title or settings.REPORT_TITLE,
        fmt=fmt,
        subtitle=caption,
        tz_name=settings.TZ,
        font_path=settings.PDF_FONT_PATH,
    )
    print(f"Wrote {len(records)} records to {path}.", file=out)


def main(
    argv: Optional[Sequence[str]] = None,
    settings: Optional[AppSettings] = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    settings = settings or get_settings()
    args = build_parser().parse_args(argv)

    try:
        store = EquipmentStore.open(args.db_url or settings.database_url)
    except StorageError as exc:
        print(f"ERROR: {exc.message}", file=err)
        return EXIT_STORAGE_ERROR

    try:
        if args.command == "add":
            _cmd_add(store, args, out)
        elif args.command == "move":
            _cmd_move(store, args, out)
        elif args.command == "remove":
            _cmd_remove(store, args, out)
        elif args.command == "show":
            _cmd_show(store, args, out)
        elif args.command == "list":
            _cmd_list(store, args, out)
        elif args.command == "export-json":
            _cmd_export(store, args, out)
        elif args.command == "import-json":
            _cmd_import(store, args, out, settings)
        elif args.command == "report":
            _cmd_report(store, args, out, settings)
        return EXIT_OK
    except (StorageError, RecordIntegrityError) as exc:
        print(f"ERROR: {exc.message}", file=err)
        return EXIT_STORAGE_ERROR
    except InventoryError as exc:
        print(f"ERROR: {exc.message}", file=err)
        return EXIT_APP_ERROR
    except (CommandError, ValueError) as exc:
        print(f"ERROR: {exc}", file=err)
        return EXIT_APP_ERROR
    finally:
        store.close()


def run() -> None:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    sys.exit(main(settings=settings))


if __name__ == "__main__":
    run()
