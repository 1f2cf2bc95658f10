"""Fixed-capacity sample series with read-time moving-average smoothing."""

import math
from collections import deque
from collections.abc import Iterable

NO_DATA = math.nan


def is_no_data(value: float) -> bool:
    """Return True if the value is the "no data" sentinel."""
    return math.isnan(value)


def finite(values: Iterable[float]) -> list[float]:
    """Drop sentinel (and infinite) entries from a series."""
    return [v for v in values if math.isfinite(v)]


def mean_of(values: Iterable[float]) -> float:
    """Arithmetic mean of the real samples, or NO_DATA if there are none."""
    real = finite(values)
    if not real:
        return NO_DATA
    return sum(real) / len(real)


def min_max(values: Iterable[float]) -> tuple[float, float]:
    """Smallest and largest real sample, or (NO_DATA, NO_DATA)."""
    real = finite(values)
    if not real:
        return NO_DATA, NO_DATA
    return min(real), max(real)


class RunningWindow:
    """FIFO running-sum accumulator of a fixed width."""

    def __init__(self, size: int):
        if size < 1:
            raise ValueError(f"window size must be at least 1, got {size}")
        self.size = size
        self._values: deque[float] = deque()
        self._sum = 0.0

    def __len__(self) -> int:
        return len(self._values)

    def add(self, value: float) -> None:
        self._values.append(value)
        self._sum += value
        if len(self._values) > self.size:
            self._sum -= self._values.popleft()

    def mean(self) -> float:
        """Average of the values currently in the window."""
        if not self._values:
            return NO_DATA
        return self._sum / len(self._values)


class BoundedSeries:
    """Fixed-capacity buffer of scalar samples for one metric stream.

    Twice the requested number of samples is retained so that a moving
    average over up to ``requested_capacity`` samples can be computed for
    every displayed point without losing displayed history.
    """

    def __init__(self, requested_capacity: int):
        """Initialize the series.

        Args:
            requested_capacity: Number of samples wanted for display

        Raises:
            ValueError: If requested_capacity is less than 1
        """
        if requested_capacity < 1:
            raise ValueError(f"requested capacity must be at least 1, got {requested_capacity}")

        self.requested_capacity = requested_capacity
        self.internal_capacity = requested_capacity * 2
        self._values: deque[float] = deque(maxlen=self.internal_capacity)
        self._high_water = 0

    def __len__(self) -> int:
        """Number of samples currently retained."""
        return len(self._values)

    @property
    def high_water(self) -> int:
        """Count of samples ever pushed."""
        return self._high_water

    @property
    def wrapped(self) -> bool:
        """True once older samples have started being evicted."""
        return self._high_water > self.internal_capacity

    @property
    def buffer(self) -> list[float]:
        """All internal slots, oldest first, with unwritten slots as NO_DATA."""
        values = list(self._values)
        return values + [NO_DATA] * (self.internal_capacity - len(values))

    def push(self, value: float) -> None:
        """Append one sample, evicting the oldest once the buffer is full."""
        self._values.append(float(value))
        self._high_water += 1

    def display_window(self) -> list[float]:
        """Most recent ``requested_capacity`` samples, oldest first.

        Left-padded with NO_DATA while fewer samples have been pushed.
        """
        filled = len(self._values)
        start = max(0, filled - self.requested_capacity)
        recent = [self._values[i] for i in range(start, filled)]
        return [NO_DATA] * (self.requested_capacity - len(recent)) + recent

    def smoothed(self, window_size: int) -> list[float]:
        """Moving average of the displayed samples over ``window_size`` samples.

        Near the start of the stream the window is only partially filled, so
        the leading points average over however many samples exist. Slots
        without any history are NO_DATA and trail the real values.

        Args:
            window_size: Number of raw samples averaged into each point

        Returns:
            Exactly ``requested_capacity`` values
        """
        if window_size <= 1:
            return self.display_window()

        filled = len(self._values)
        first_displayed = filled - self.requested_capacity
        start = max(0, first_displayed - window_size)
        window = RunningWindow(window_size)
        series: list[float] = []

        for i in range(start, filled):
            window.add(self._values[i])
            if i >= first_displayed:
                series.append(window.mean())

        series.extend([NO_DATA] * (self.requested_capacity - len(series)))
        return series
