from __future__ import annotations

from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .models import SeatStatus, ShapeKind


class _Doc(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Point2D(_Doc):
    x: float
    y: float


class BoundsModel(_Doc):
    min_x: float = Field(alias="minX")
    min_y: float = Field(alias="minY")
    max_x: float = Field(alias="maxX")
    max_y: float = Field(alias="maxY")


class PathSpecModel(_Doc):
    kind: ShapeKind
    center: Point2D
    size: float = Field(gt=0)


class SeatModel(_Doc):
    id: str
    x: float
    y: float
    row: int = Field(ge=1)
    number: int = Field(ge=1)
    section_id: str = Field(alias="sectionId", validation_alias=AliasChoices("sectionId", "section", "section_id"))
    status: SeatStatus = SeatStatus.available
    price: Optional[float] = None
    category: Optional[str] = None
    ticket_type: Optional[str] = Field(default=None, alias="ticketType", validation_alias=AliasChoices("ticketType", "ticketId", "ticket_type"))


class SectionModel(_Doc):
    id: str
    name: str
    points: list[Point2D] = Field(default_factory=list)
    bounds: Optional[BoundsModel] = None
    rows: int = Field(ge=0)
    seats_per_row: int = Field(ge=0, alias="seatsPerRow")
    price: Optional[float] = 0.0
    shape: ShapeKind = ShapeKind.polygon
    has_seats: bool = Field(default=True, alias="hasSeats")
    custom_seat_count: Optional[int] = Field(default=None, alias="customSeatCount")
    ticket_type: Optional[str] = Field(default=None, alias="ticketType", validation_alias=AliasChoices("ticketType", "ticketId", "ticket_type"))
    label_position: Optional[Point2D] = Field(default=None, alias="labelPosition")
    color: str = "#3498db"
    category: Optional[str] = None
    # SVG path strings from older layouts are accepted but not interpreted.
    path: Optional[Union[PathSpecModel, str]] = None
    seats: list[SeatModel] = Field(default_factory=list)


class StageModel(_Doc):
    x: float = 350.0
    y: float = 50.0
    width: float = 300.0
    height: float = 80.0


class AisleModel(_Doc):
    start: Point2D
    end: Point2D
    width: float = Field(ge=0)


class LayoutModel(_Doc):
    version: int = 1
    sections: list[SectionModel] = Field(default_factory=list)
    stage: StageModel = Field(default_factory=StageModel)
    aisles: list[AisleModel] = Field(default_factory=list)
    seat_statuses: list[tuple[str, SeatStatus]] = Field(default_factory=list, alias="seatStatuses")
    seat_holders: list[tuple[str, str]] = Field(default_factory=list, alias="seatHolders")


class DetectedTextModel(_Doc):
    text: str
    bbox: tuple[float, float, float, float]
    confidence: float = 0.0


class ExtractionModel(_Doc):
    # [[x, y], ...] per polygon
    polygons: list[list[tuple[float, float]]]
    detected_text: list[DetectedTextModel] = Field(default_factory=list)
    bounding_boxes: list[list[float]] = Field(default_factory=list)
