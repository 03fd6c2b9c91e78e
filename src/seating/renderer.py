"""Vector zone renderer.

Turns a venue overlay (SVG) and a stock snapshot into a declarative scene:
a mapping from zone id to its visual state. Markup is rendered from that
mapping onto a copy of the parsed document, the source tree is never touched.

Zones with stock are highlighted and interactive, zones without stock are
transparent and inert, every other element is forced transparent and inert
so only real zones can be hit.
"""

import copy
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

import httpx

from src.exceptions import OverlayUnavailableError
from src.seating.snapshot import StockSnapshot
from src.utils.config import settings

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", "http://www.w3.org/1999/xlink")

AVAILABLE_FILL = "rgba(158,229,181,0.6)"
HOVER_FILL = "rgba(110,207,141,0.8)"
TRANSPARENT = "transparent"

HoverHandler = Callable[[Optional[str]], None]
SelectHandler = Callable[[str], None]


class ZoneState(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ZoneVisual:
    zone_id: str
    stock: int
    hovered: bool = False

    @property
    def state(self) -> ZoneState:
        return ZoneState.AVAILABLE if self.stock > 0 else ZoneState.UNAVAILABLE

    @property
    def interactive(self) -> bool:
        return self.state == ZoneState.AVAILABLE

    @property
    def fill(self) -> str:
        if not self.interactive:
            return TRANSPARENT
        return HOVER_FILL if self.hovered else AVAILABLE_FILL

    @property
    def pointer_events(self) -> str:
        return "auto" if self.interactive else "none"


@dataclass(frozen=True)
class ViewBox:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def parse(cls, value: str | None) -> "ViewBox":
        if not value:
            raise OverlayUnavailableError("overlay has no viewBox")
        parts = re.split(r"[\s,]+", value.strip())
        if len(parts) != 4:
            raise OverlayUnavailableError(f"malformed viewBox '{value}'")
        try:
            x, y, width, height = (float(p) for p in parts)
        except ValueError:
            raise OverlayUnavailableError(f"malformed viewBox '{value}'")
        if width <= 0 or height <= 0:
            raise OverlayUnavailableError(f"empty viewBox '{value}'")
        return cls(x, y, width, height)

    def crop_top(self, offset: float) -> "ViewBox":
        """Drop `offset` units from the top edge to register with the raster background"""
        if offset >= self.height:
            raise OverlayUnavailableError(f"crop offset {offset} exceeds overlay height {self.height}")
        return ViewBox(self.x, self.y + offset, self.width, self.height - offset)

    def as_list(self) -> list[float]:
        return [self.x, self.y, self.width, self.height]

    def __str__(self) -> str:
        return " ".join(f"{v:g}" for v in self.as_list())


def _merge_style(style: str | None, **properties: str) -> str:
    declarations: dict[str, str] = {}
    for chunk in (style or "").split(";"):
        if ":" in chunk:
            name, value = chunk.split(":", 1)
            declarations[name.strip()] = value.strip()
    for name, value in properties.items():
        declarations[name.replace("_", "-")] = value
    return ";".join(f"{name}:{value}" for name, value in declarations.items())


def zone_visuals(overlay_ids: set[str], snapshot: StockSnapshot) -> dict[str, ZoneVisual]:
    """Pure zone id -> visual mapping; snapshot ids absent from the overlay are ignored"""
    return {
        zone_id: ZoneVisual(zone_id=zone_id, stock=snapshot.get(zone_id))
        for zone_id in snapshot
        if zone_id in overlay_ids
    }


class ZoneOverlay:
    """Interactive overlay built from an SVG document and a stock snapshot.

    Emits exactly two signals: hover (zone id, or None on leave) and select
    (zone id). Pointer input on inert or unknown zones is ignored.
    """

    def __init__(
        self,
        root: ET.Element | None,
        view_box: ViewBox | None,
        visuals: dict[str, ZoneVisual],
        on_hover: HoverHandler | None = None,
        on_select: SelectHandler | None = None,
    ):
        self._root = root
        self.view_box = view_box
        self._visuals = dict(visuals)
        self.on_hover = on_hover
        self.on_select = on_select

    @classmethod
    def empty(cls, on_hover: HoverHandler | None = None, on_select: SelectHandler | None = None) -> "ZoneOverlay":
        return cls(None, None, {}, on_hover=on_hover, on_select=on_select)

    @property
    def is_empty(self) -> bool:
        return self._root is None

    @property
    def zones(self) -> dict[str, ZoneVisual]:
        return dict(self._visuals)

    @property
    def hovered_zone(self) -> str | None:
        for zone_id, visual in self._visuals.items():
            if visual.hovered:
                return zone_id
        return None

    def visual(self, zone_id: str) -> ZoneVisual | None:
        return self._visuals.get(zone_id)

    def is_interactive(self, zone_id: str) -> bool:
        visual = self._visuals.get(zone_id)
        return visual is not None and visual.interactive

    def hover(self, zone_id: str) -> bool:
        if not self.is_interactive(zone_id):
            return False
        previous = self.hovered_zone
        if previous is not None and previous != zone_id:
            self._visuals[previous] = replace(self._visuals[previous], hovered=False)
        self._visuals[zone_id] = replace(self._visuals[zone_id], hovered=True)
        if self.on_hover:
            self.on_hover(zone_id)
        return True

    def leave(self, zone_id: str) -> bool:
        if not self.is_interactive(zone_id):
            return False
        self._visuals[zone_id] = replace(self._visuals[zone_id], hovered=False)
        if self.on_hover:
            self.on_hover(None)
        return True

    def click(self, zone_id: str) -> bool:
        if not self.is_interactive(zone_id):
            return False
        if self.on_select:
            self.on_select(zone_id)
        return True

    def to_svg(self) -> str:
        """Render the current scene as responsive SVG markup ('' for an empty overlay)"""
        if self._root is None:
            return ""

        root = copy.deepcopy(self._root)
        for attr in ("width", "height"):
            root.attrib.pop(attr, None)
        root.set("preserveAspectRatio", "xMidYMid meet")
        root.set("viewBox", str(self.view_box))
        root.set("style", _merge_style(root.get("style"), width="100%", height="100%", display="block"))

        for el in root.iter():
            if el is root:
                continue
            el.set("style", _merge_style(el.get("style"), fill=TRANSPARENT, pointer_events="none"))

        index = _index_ids(root)
        for zone_id, visual in self._visuals.items():
            group = index.get(zone_id)
            if group is None:
                continue
            group.set("data-zone-state", visual.state.value)
            for el in group.iter():
                el.set("style", _merge_style(el.get("style"), fill=visual.fill, pointer_events=visual.pointer_events))

        return ET.tostring(root, encoding="unicode")


def _index_ids(root: ET.Element) -> dict[str, ET.Element]:
    index: dict[str, ET.Element] = {}
    for el in root.iter():
        el_id = el.get("id")
        if el_id:
            # first match wins, like a document id lookup
            index.setdefault(el_id, el)
    return index


def build_overlay(
    svg_text: str,
    snapshot: StockSnapshot,
    crop_offset: float | None = None,
    on_hover: HoverHandler | None = None,
    on_select: SelectHandler | None = None,
) -> ZoneOverlay:
    """Parse an overlay document; anything unusable yields an empty, inert overlay."""
    offset = settings.SVG_CROP_OFFSET_Y if crop_offset is None else crop_offset
    try:
        root = ET.fromstring(svg_text)
        if not root.tag.endswith("svg"):
            raise OverlayUnavailableError(f"unexpected root element {root.tag}")
        view_box = ViewBox.parse(root.get("viewBox")).crop_top(offset)
    except (ET.ParseError, ValueError) as e:
        logger.warning(f"Unparsable seating overlay: {e}")
        return ZoneOverlay.empty(on_hover=on_hover, on_select=on_select)
    except OverlayUnavailableError as e:
        logger.warning(f"Unusable seating overlay: {e.message}")
        return ZoneOverlay.empty(on_hover=on_hover, on_select=on_select)

    visuals = zone_visuals(set(_index_ids(root)), snapshot)
    unknown = [zone_id for zone_id in snapshot if zone_id not in visuals]
    if unknown:
        logger.debug(f"Snapshot zones missing from overlay: {unknown}")
    return ZoneOverlay(root, view_box, visuals, on_hover=on_hover, on_select=on_select)


async def load_overlay(
    svg_src: str | None,
    snapshot: StockSnapshot,
    client: httpx.AsyncClient | None = None,
    crop_offset: float | None = None,
    on_hover: HoverHandler | None = None,
    on_select: SelectHandler | None = None,
) -> ZoneOverlay:
    """Fetch and build an overlay; fetch failures yield an empty, inert overlay."""
    if not svg_src:
        return ZoneOverlay.empty(on_hover=on_hover, on_select=on_select)

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=httpx.Timeout(5.0, connect=2.0)) as own_client:
                response = await own_client.get(svg_src)
        else:
            response = await client.get(svg_src)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch seating overlay {svg_src}: {e}")
        return ZoneOverlay.empty(on_hover=on_hover, on_select=on_select)

    return build_overlay(response.text, snapshot, crop_offset=crop_offset, on_hover=on_hover, on_select=on_select)
