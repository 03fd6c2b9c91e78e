import math

MIN_SCALE = 0.5
MAX_SCALE = 4.0
ZOOM_FACTOR = 1.2


def clamp(value: float, lower: float, upper: float) -> float:
    return min(upper, max(lower, value))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class PanZoomViewport:
    """Uniform scale + translation over the overlay, for a container of a given size.

    Zoom buttons and reset recenter the content, drag-panning only moves it.
    The pan gesture ends on a document-level release, wherever the pointer is.
    """

    def __init__(self, width: float, height: float, zoom_factor: float = ZOOM_FACTOR):
        self.width = width
        self.height = height
        self.zoom_factor = zoom_factor
        self.scale = 1.0
        self.translate_x, self.translate_y = self._centered(self.scale)
        self._panning = False
        self._last = (0.0, 0.0)

    def _centered(self, scale: float) -> tuple[int, int]:
        return (
            _round_half_up((self.width - self.width * scale) / 2),
            _round_half_up((self.height - self.height * scale) / 2),
        )

    def zoom(self, factor: float) -> float:
        self.scale = clamp(self.scale * factor, MIN_SCALE, MAX_SCALE)
        self.translate_x, self.translate_y = self._centered(self.scale)
        return self.scale

    def zoom_in(self) -> float:
        return self.zoom(self.zoom_factor)

    def zoom_out(self) -> float:
        return self.zoom(1 / self.zoom_factor)

    def reset(self) -> None:
        self.scale = 1.0
        self.translate_x, self.translate_y = self._centered(self.scale)

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self.translate_x, self.translate_y = self._centered(self.scale)

    @property
    def is_panning(self) -> bool:
        return self._panning

    def start_pan(self, x: float, y: float) -> None:
        self._panning = True
        self._last = (x, y)

    def move(self, x: float, y: float) -> bool:
        if not self._panning:
            return False
        last_x, last_y = self._last
        self.translate_x += x - last_x
        self.translate_y += y - last_y
        self._last = (x, y)
        return True

    def end_pan(self) -> None:
        self._panning = False

    @property
    def translate(self) -> tuple[float, float]:
        return self.translate_x, self.translate_y

    @property
    def transform(self) -> str:
        return f"translate({self.translate_x:g}px, {self.translate_y:g}px) scale({self.scale:g})"

    def to_content(self, x: float, y: float) -> tuple[float, float]:
        """Container coordinates -> content coordinates (transform origin top left)"""
        return (x - self.translate_x) / self.scale, (y - self.translate_y) / self.scale
