from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Optional

from pydantic import ValidationError

from .errors import LayoutFormatError, SeatMapError
from .geometry import Point
from .models import (
    Aisle,
    Boundary,
    GeneratedPath,
    PathSpec,
    PolygonBoundary,
    Seat,
    SeatMapDocument,
    SeatStatus,
    Section,
    Stage,
)
from .schemas import (
    AisleModel,
    BoundsModel,
    LayoutModel,
    PathSpecModel,
    Point2D,
    SeatModel,
    SectionModel,
    StageModel,
)
from .status import SeatStatusEngine

logger = logging.getLogger(__name__)

LAYOUT_VERSION = 1


def _pt(p: Point) -> Point2D:
    return Point2D(x=p.x, y=p.y)


def _section_model(section: Section, statuses: Mapping[str, SeatStatus]) -> SectionModel:
    b = section.bounds
    path = None
    if isinstance(section.boundary, GeneratedPath):
        spec = section.boundary.spec
        path = PathSpecModel(kind=spec.kind, center=_pt(spec.center), size=spec.size)
    return SectionModel(
        id=section.id,
        name=section.name,
        points=[_pt(p) for p in section.points],
        bounds=BoundsModel(min_x=b.min_x, min_y=b.min_y, max_x=b.max_x, max_y=b.max_y),
        rows=section.rows,
        seats_per_row=section.seats_per_row,
        price=section.price,
        shape=section.shape,
        has_seats=section.has_seats,
        custom_seat_count=section.custom_seat_count,
        ticket_type=section.ticket_type,
        label_position=_pt(section.label),
        color=section.color,
        category=section.category,
        path=path,
        seats=[
            SeatModel(
                id=s.id,
                x=s.x,
                y=s.y,
                row=s.row,
                number=s.number,
                section_id=s.section_id,
                status=statuses.get(s.id, s.status),
                price=s.price,
                category=s.category,
                ticket_type=s.ticket_type,
            )
            for s in section.seats
        ],
    )


def layout_to_dict(doc: SeatMapDocument, engine: Optional[SeatStatusEngine] = None) -> dict:
    statuses = engine.statuses if engine is not None else {}
    model = LayoutModel(
        version=LAYOUT_VERSION,
        sections=[_section_model(s, statuses) for s in doc.sections],
        stage=StageModel(x=doc.stage.x, y=doc.stage.y, width=doc.stage.width, height=doc.stage.height),
        aisles=[AisleModel(start=_pt(a.start), end=_pt(a.end), width=a.width) for a in doc.aisles],
        seat_statuses=engine.to_pairs() if engine is not None else [],
        seat_holders=engine.holder_pairs() if engine is not None else [],
    )
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _boundary(m: SectionModel) -> Boundary:
    if isinstance(m.path, PathSpecModel):
        return GeneratedPath(PathSpec(kind=m.path.kind, center=Point(m.path.center.x, m.path.center.y), size=m.path.size))
    if len(m.points) >= 3 or m.bounds is None:
        return PolygonBoundary(tuple(Point(p.x, p.y) for p in m.points))
    # Shape sections saved with only a box: keep the box as a generated path.
    b = m.bounds
    center = Point((b.min_x + b.max_x) / 2, (b.min_y + b.max_y) / 2)
    size = max(b.max_x - b.min_x, b.max_y - b.min_y) / 2
    return GeneratedPath(PathSpec(kind=m.shape, center=center, size=size))


def _section(m: SectionModel) -> Section:
    price = float(m.price or 0.0)
    category = m.category or "standard"
    return Section(
        id=m.id,
        name=m.name,
        boundary=_boundary(m),
        rows=m.rows,
        seats_per_row=m.seats_per_row,
        price=price,
        ticket_type=m.ticket_type,
        has_seats=m.has_seats,
        custom_seat_count=m.custom_seat_count,
        label_position=Point(m.label_position.x, m.label_position.y) if m.label_position else None,
        shape=m.shape,
        color=m.color,
        category=category,
        seats=tuple(
            Seat(
                id=s.id,
                x=s.x,
                y=s.y,
                row=s.row,
                number=s.number,
                section_id=s.section_id,
                status=s.status,
                price=price if s.price is None else s.price,
                category=s.category or category,
                ticket_type=s.ticket_type,
            )
            for s in m.seats
        ),
    )


def layout_from_dict(data: dict) -> tuple[SeatMapDocument, SeatStatusEngine]:
    """
    Rebuild a document and its status engine from an exported layout.

    Stored seats and IDs are kept as-is. The engine is bound to the document
    after loading, so statuses of seats no longer in the layout read as
    available but survive a re-export.
    """
    try:
        model = LayoutModel.model_validate(data)
    except ValidationError as e:
        raise LayoutFormatError(f"invalid layout document: {e}") from e
    if model.version != LAYOUT_VERSION:
        raise LayoutFormatError(f"unsupported layout version: {model.version}")

    ids = [s.id for s in model.sections]
    if len(ids) != len(set(ids)):
        raise LayoutFormatError("section ids must be unique")

    doc = SeatMapDocument(
        sections=[_section(s) for s in model.sections],
        stage=Stage(x=model.stage.x, y=model.stage.y, width=model.stage.width, height=model.stage.height),
        aisles=[
            Aisle(start=Point(a.start.x, a.start.y), end=Point(a.end.x, a.end.y), width=a.width)
            for a in model.aisles
        ],
    )
    engine = SeatStatusEngine()
    engine.load(model.seat_statuses)
    engine.load_holders(model.seat_holders)
    engine.bind(doc.has_seat)
    logger.debug("loaded layout with %d sections and %d statuses", len(doc.sections), len(model.seat_statuses))
    return doc, engine


def load_layout(path: str | Path) -> tuple[SeatMapDocument, SeatStatusEngine]:
    p = Path(path)
    if not p.exists():
        raise SeatMapError(f"layout file not found: {p}")

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise LayoutFormatError(f"failed to read layout JSON: {e}") from e

    return layout_from_dict(data)


def save_layout(doc: SeatMapDocument, path: str | Path, engine: Optional[SeatStatusEngine] = None) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(layout_to_dict(doc, engine), indent=2, sort_keys=True) + "\n", encoding="utf-8")


def maybe_init_layout(path: str | Path, *, overwrite: bool = False) -> tuple[SeatMapDocument, SeatStatusEngine]:
    p = Path(path)
    if p.exists() and not overwrite:
        return load_layout(p)

    doc = SeatMapDocument()
    engine = SeatStatusEngine(doc.has_seat)
    save_layout(doc, p, engine)
    return doc, engine
