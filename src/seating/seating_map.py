import logging

import httpx

from src.dto.offer import EventDatePage, TicketOffer
from src.dto.seating import SeatingMapView, ZoneStateView
from src.seating.offers import filter_offers
from src.seating.renderer import ZoneOverlay, load_overlay
from src.seating.snapshot import StockSnapshot
from src.seating.viewport import PanZoomViewport

logger = logging.getLogger(__name__)


class SeatingMap:
    """Event-date seating selector: overlay under a pan/zoom camera, driving the ticket list."""

    def __init__(self, page: EventDatePage, overlay: ZoneOverlay, viewport: PanZoomViewport):
        self.page = page
        self.overlay = overlay
        self.viewport = viewport
        self.overlay.on_hover = self._handle_hover
        self.overlay.on_select = self._handle_select
        self.selected_zone: str | None = None
        self.hovered_zone: str | None = None
        self.category: str | None = None
        self.quantity: int | None = None

    @classmethod
    async def load(
        cls,
        page: EventDatePage,
        width: float = 800,
        height: float = 600,
        client: httpx.AsyncClient | None = None,
    ) -> "SeatingMap":
        snapshot = StockSnapshot(stock=page.stock_per_zone)
        overlay = await load_overlay(page.svg_src, snapshot, client=client)
        if overlay.is_empty:
            logger.info(f"No usable overlay for {page.event_slug} on {page.event_date}")
        return cls(page, overlay, PanZoomViewport(width, height))

    def _handle_hover(self, zone_id: str | None) -> None:
        self.hovered_zone = zone_id

    def _handle_select(self, zone_id: str) -> None:
        # selecting the current zone again goes back to every ticket
        self.selected_zone = None if self.selected_zone == zone_id else zone_id

    # pointer input is expressed in overlay zone ids, the camera does not change them
    def hover(self, zone_id: str) -> bool:
        return self.overlay.hover(zone_id)

    def leave(self, zone_id: str) -> bool:
        return self.overlay.leave(zone_id)

    def click(self, zone_id: str) -> bool:
        return self.overlay.click(zone_id)

    def pointer_down(self, x: float, y: float) -> None:
        self.viewport.start_pan(x, y)

    def pointer_move(self, x: float, y: float) -> bool:
        return self.viewport.move(x, y)

    def pointer_up(self) -> None:
        self.viewport.end_pan()

    def highlight_from_ticket(self, zone_id: str | None) -> None:
        """Hovering a ticket card marks its zone as hovered, like hovering the zone itself"""
        self.hovered_zone = zone_id

    def clear_selection(self) -> None:
        self.selected_zone = None

    def visible_offers(self) -> list[TicketOffer]:
        return filter_offers(
            self.page.offers,
            zone_id=self.selected_zone,
            category=self.category,
            quantity=self.quantity,
        )

    def view(self) -> SeatingMapView:
        return SeatingMapView(
            png_src=self.page.png_src,
            svg_src=self.page.svg_src,
            view_box=self.overlay.view_box.as_list() if self.overlay.view_box else None,
            zones=[
                ZoneStateView(
                    zone_id=visual.zone_id,
                    state=visual.state.value,
                    fill=visual.fill,
                    pointer_events=visual.pointer_events,
                    stock=visual.stock,
                )
                for visual in self.overlay.zones.values()
            ],
            svg=self.overlay.to_svg(),
        )
