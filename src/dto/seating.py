from src.dto import BaseSchema


class ZoneStateView(BaseSchema):
    zone_id: str
    state: str
    fill: str
    pointer_events: str
    stock: int

class SeatingMapView(BaseSchema):
    png_src: str | None = None
    svg_src: str | None = None
    view_box: list[float] | None = None
    zones: list[ZoneStateView] = []
    svg: str = ""
