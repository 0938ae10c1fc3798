import math
import re
from typing import Iterable, Optional
import numpy as np

_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


class MathTools:
    """Numeric helpers shared by the analytics services."""

    VOLUME_DIVISOR: float = 1000.0
    SPRINT_NUMERATOR: float = 100.0
    SPRINT_WEIGHT: float = 10.0
    PERCENTILES: tuple[float, float, float] = (0.25, 0.50, 0.75)

    @staticmethod
    def parse_number(value: Optional[str]) -> Optional[float]:
        """Parse the leading number of a user-entered value.

        ``"100"``, ``"100kg"`` and ``" 4.8 s"`` all parse; blank or
        non-numeric text returns ``None``.
        """
        if value is None:
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            number = float(value)
        else:
            match = _LEADING_FLOAT.match(str(value))
            if match is None:
                return None
            number = float(match.group(1))
        if math.isnan(number) or math.isinf(number):
            return None
        return number

    @staticmethod
    def parse_positive(value: Optional[str]) -> Optional[float]:
        """Return the parsed value when it is strictly positive."""
        number = MathTools.parse_number(value)
        if number is None or number <= 0:
            return None
        return number

    @staticmethod
    def is_blank(value: Optional[str]) -> bool:
        return value is None or str(value).strip() == ""

    @staticmethod
    def round_half_up(value: float) -> int:
        """Round to the nearest integer with halves rounded up."""
        return int(math.floor(value + 0.5))

    @staticmethod
    def percent(part: float, whole: float) -> int:
        """Return ``part / whole`` as a rounded percentage, 0 when ``whole`` is 0."""
        if whole <= 0:
            return 0
        return MathTools.round_half_up(100.0 * part / whole)

    @staticmethod
    def mean(values: Iterable[float]) -> float:
        data = list(values)
        if not data:
            return 0.0
        return float(np.mean(np.array(data, dtype=float)))

    @classmethod
    def percentile_boundaries(cls, total: int) -> tuple[int, int, int, int]:
        """Return the last rank of each quarter for ``total`` ranked players."""
        if total < 0:
            raise ValueError("total must be non-negative")
        b25, b50, b75 = (math.ceil(total * p) for p in cls.PERCENTILES)
        return b25, b50, b75, total

    @classmethod
    def composite_score(
        cls, total_volume: float, sprint_score_sum: float, sprint_count: int
    ) -> float:
        """Blend lifted volume and sprint speed into one score."""
        avg_sprint = sprint_score_sum / sprint_count if sprint_count > 0 else 0.0
        return total_volume / cls.VOLUME_DIVISOR + avg_sprint * cls.SPRINT_WEIGHT

    @classmethod
    def sprint_score(cls, seconds: float) -> float:
        if seconds <= 0:
            raise ValueError("seconds must be positive")
        return cls.SPRINT_NUMERATOR / seconds
