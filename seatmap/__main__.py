from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .config import load_defaults
from .document import (
    DetectedText,
    add_section_from_points,
    add_shape_section,
    delete_section,
    import_polygons,
    move_section,
    recenter,
    regenerate_seats,
    split_section,
)
from .errors import SeatMapError
from .geometry import Point
from .models import ShapeKind
from .pricing import summarize
from .schemas import ExtractionModel
from .storage import load_layout, maybe_init_layout, save_layout
from .templates import SECTION_TEMPLATES, add_template_section

DEFAULT_FILE = "seatmap.json"


def _parse_point(text: str) -> Point:
    try:
        x, y = text.split(",")
        return Point(float(x), float(y))
    except ValueError as e:
        raise SeatMapError(f"invalid point {text!r}; expected x,y") from e


def _parse_points(text: str) -> list[Point]:
    return [_parse_point(tok) for tok in text.split()]


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--file",
        default=DEFAULT_FILE,
        help=f"Path to layout JSON file (default: {DEFAULT_FILE})",
    )


def cmd_init(args: argparse.Namespace) -> int:
    maybe_init_layout(args.file, overwrite=args.overwrite)
    print(f"Initialized layout at {args.file}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    for s in doc.sections:
        b = s.bounds
        print(
            f"{s.id}  {s.name!r}  shape={s.shape.value}  {s.rows}x{s.seats_per_row}  "
            f"seats={len(s.seats)}  price={s.price:g}  "
            f"bounds=({b.min_x:g},{b.min_y:g})-({b.max_x:g},{b.max_y:g})"
        )
    summary = summarize(doc, engine.statuses)
    print(
        f"{summary.seats_total} seats: {summary.seats_available} available, "
        f"{summary.seats_occupied} occupied, {summary.seats_locked} locked"
    )
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    section = add_section_from_points(doc, _parse_points(args.points), load_defaults(), engine.statuses, name=args.name)
    save_layout(doc, args.file, engine)
    print(f"Added section {section.id} with {len(section.seats)} seats")
    return 0


def cmd_shape(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    section = add_shape_section(
        doc, args.shape, _parse_point(args.center), load_defaults(), engine.statuses, size=args.size, name=args.name
    )
    save_layout(doc, args.file, engine)
    print(f"Added {args.shape} section {section.id} with {len(section.seats)} seats")
    return 0


def cmd_template(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    section = add_template_section(doc, args.template, load_defaults(), engine.statuses, center=_parse_point(args.center))
    save_layout(doc, args.file, engine)
    print(f"Added {args.template} section {section.id} with {len(section.seats)} seats")
    return 0


def cmd_move(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    move_section(doc, args.section, args.dx, args.dy)
    save_layout(doc, args.file, engine)
    print(f"Moved {args.section} by ({args.dx:g}, {args.dy:g})")
    return 0


def cmd_split(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    result = split_section(doc, args.section, _parse_point(args.start), _parse_point(args.end), engine.statuses)
    if not result.ok:
        print(f"Split rejected: {result.failure.reason}")
        return 1
    save_layout(doc, args.file, engine)
    a, b = result.sections
    print(f"Split {args.section} into {a.id} ({len(a.seats)} seats) and {b.id} ({len(b.seats)} seats)")
    return 0


def cmd_regenerate(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    section = regenerate_seats(doc, args.section, engine.statuses)
    save_layout(doc, args.file, engine)
    print(f"Regenerated {len(section.seats)} seats for {section.id}")
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    delete_section(doc, args.section, engine.statuses, force=args.force)
    save_layout(doc, args.file, engine)
    print(f"Deleted {args.section}")
    return 0


def cmd_toggle(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    changed: list[str] = []
    if not engine.toggle(args.seat, lambda sid, status: changed.append(status.value)):
        print(f"Seat {args.seat} cannot be toggled (status: {engine.get_status(args.seat).value})")
        return 1
    save_layout(doc, args.file, engine)
    print(f"Seat {args.seat} is now {changed[0]}")
    return 0


def cmd_lock(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    if not engine.lock(args.seat, args.email):
        print(f"Unknown seat {args.seat}")
        return 1
    save_layout(doc, args.file, engine)
    print(f"Locked {args.seat}" + (f" for {args.email}" if args.email else ""))
    return 0


def cmd_unlock(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    if not engine.unlock(args.seat):
        print(f"Seat {args.seat} is not locked")
        return 1
    save_layout(doc, args.file, engine)
    print(f"Unlocked {args.seat}")
    return 0


def cmd_price(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    summary = summarize(doc, engine.statuses)
    if args.json:
        print(json.dumps(summary.to_dict(), indent=2, sort_keys=True))
    else:
        print(f"Total: {summary.total_price:g} ({summary.seats_occupied} occupied seats)")
    return 0


def cmd_import_polygons(args: argparse.Namespace) -> int:
    doc, engine = load_layout(args.file)
    defaults = load_defaults()
    try:
        extraction = ExtractionModel.model_validate_json(Path(args.input).read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        raise SeatMapError(f"failed to read polygons: {e}") from e
    polygons = [[Point(x, y) for (x, y) in poly] for poly in extraction.polygons]
    texts = [DetectedText(text=t.text, bbox=t.bbox) for t in extraction.detected_text]
    created = import_polygons(doc, polygons, defaults, engine.statuses, detected_text=texts)
    if args.recenter:
        recenter(doc, defaults.viewport_width, defaults.viewport_height)
    save_layout(doc, args.file, engine)
    print(f"Imported {len(created)} sections from {args.input}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="seatmap", description="Venue seat-map layout engine (CLI).")
    p.add_argument("--log-level", default=None, help="Logging level (default: $SEATMAP_LOG_LEVEL or WARNING)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="Create an empty layout JSON file")
    _add_common_args(p_init)
    p_init.add_argument("--overwrite", action="store_true", help="Overwrite existing layout file")
    p_init.set_defaults(func=cmd_init)

    p_show = sub.add_parser("show", help="List sections and seat counts")
    _add_common_args(p_show)
    p_show.set_defaults(func=cmd_show)

    p_add = sub.add_parser("add", help="Add a section from polygon points")
    _add_common_args(p_add)
    p_add.add_argument("--points", required=True, help='Space separated x,y pairs, e.g. "0,0 100,0 100,50"')
    p_add.add_argument("--name")
    p_add.set_defaults(func=cmd_add)

    p_shape = sub.add_parser("shape", help="Add a preset shape section")
    _add_common_args(p_shape)
    p_shape.add_argument("--shape", required=True, choices=[k.value for k in ShapeKind])
    p_shape.add_argument("--center", required=True, help="x,y")
    p_shape.add_argument("--size", type=float)
    p_shape.add_argument("--name")
    p_shape.set_defaults(func=cmd_shape)

    p_tpl = sub.add_parser("template", help="Add a section from a template")
    _add_common_args(p_tpl)
    p_tpl.add_argument("--template", required=True, choices=[t.id for t in SECTION_TEMPLATES])
    p_tpl.add_argument("--center", default="500,300", help="x,y (default: 500,300)")
    p_tpl.set_defaults(func=cmd_template)

    p_move = sub.add_parser("move", help="Translate a section")
    _add_common_args(p_move)
    p_move.add_argument("--section", required=True)
    p_move.add_argument("--dx", type=float, required=True)
    p_move.add_argument("--dy", type=float, required=True)
    p_move.set_defaults(func=cmd_move)

    p_split = sub.add_parser("split", help="Split a section along a line")
    _add_common_args(p_split)
    p_split.add_argument("--section", required=True)
    p_split.add_argument("--start", required=True, help="x,y")
    p_split.add_argument("--end", required=True, help="x,y")
    p_split.set_defaults(func=cmd_split)

    p_regen = sub.add_parser("regenerate", help="Regenerate a section's seats")
    _add_common_args(p_regen)
    p_regen.add_argument("--section", required=True)
    p_regen.set_defaults(func=cmd_regenerate)

    p_delete = sub.add_parser("delete", help="Delete a section")
    _add_common_args(p_delete)
    p_delete.add_argument("--section", required=True)
    p_delete.add_argument("--force", action="store_true", help="Delete even with occupied or locked seats")
    p_delete.set_defaults(func=cmd_delete)

    p_toggle = sub.add_parser("toggle", help="Toggle a seat between available and occupied")
    _add_common_args(p_toggle)
    p_toggle.add_argument("--seat", required=True)
    p_toggle.set_defaults(func=cmd_toggle)

    p_lock = sub.add_parser("lock", help="Lock a seat")
    _add_common_args(p_lock)
    p_lock.add_argument("--seat", required=True)
    p_lock.add_argument("--email")
    p_lock.set_defaults(func=cmd_lock)

    p_unlock = sub.add_parser("unlock", help="Unlock a seat")
    _add_common_args(p_unlock)
    p_unlock.add_argument("--seat", required=True)
    p_unlock.set_defaults(func=cmd_unlock)

    p_price = sub.add_parser("price", help="Total price of occupied seats")
    _add_common_args(p_price)
    p_price.add_argument("--json", action="store_true", help="Print the full occupancy summary as JSON")
    p_price.set_defaults(func=cmd_price)

    p_import = sub.add_parser("import-polygons", help="Create sections from detected polygons (JSON)")
    _add_common_args(p_import)
    p_import.add_argument("--input", required=True)
    p_import.add_argument("--recenter", action="store_true", help="Center the layout in the viewport afterwards")
    p_import.set_defaults(func=cmd_import_polygons)

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    try:
        level = args.log_level or load_defaults().log_level
        logging.basicConfig(level=level.upper(), format="%(levelname)s %(name)s: %(message)s")
        return int(args.func(args))
    except SeatMapError as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
