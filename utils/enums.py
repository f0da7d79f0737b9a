from enum import Enum, auto


class FractalKind(Enum):
    MANDELBROT = auto()
    JULIA = auto()

    @classmethod
    def parse(cls, value):
        """
        Resolves a fractal name ("mandelbrot", "Julia", ...) or member.
        Returns None for unknown names so callers can pick their own fallback.
        """
        if isinstance(value, cls):
            return value
        return cls.__members__.get(str(value).strip().upper())


class ColorScheme(Enum):
    RAINBOW = auto()
    GRAYSCALE = auto()
    FIRE = auto()
    ICE = auto()
    CUSTOM = auto()

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        return cls.__members__.get(str(value).strip().upper())


class RenderOutcome(Enum):
    PUBLISHED = auto()
    SUPERSEDED = auto()
    FAILED = auto()


class TourState(Enum):
    IDLE = auto()
    RUNNING = auto()


class Tools(Enum):
    Drag = auto()
    Rectangle_select = auto()
    Pick_julia = auto()
