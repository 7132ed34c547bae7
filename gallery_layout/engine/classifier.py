"""
classifier.py — Wide/narrow classification from an image aspect ratio.

A wide image spans two masonry columns. The cut-off is 16:9 with two
tolerances: ratios inside a band around 16:9 count as 16:9-class, and
everything else is compared against the threshold minus a small slack so
near-widescreen crops still span.
"""

from dataclasses import dataclass

from .errors import ensure_positive


WIDE_THRESHOLD = 16 / 9          # 1.778
BAND_TOLERANCE = 0.08            # |ratio - 16/9| <= 0.08 is 16:9-class
NEAR_TOLERANCE = 0.1             # ratio >= 16/9 - 0.1 is wide


@dataclass(frozen=True)
class Classification:
    aspect_ratio: float
    is_wide: bool


class AspectRatioClassifier:
    """Decides whether an item spans two columns.

    Pure: the same ratio always yields the same answer. Raises
    InvalidDimension for non-positive or non-finite ratios.
    """

    def __init__(
        self,
        wide_threshold: float = WIDE_THRESHOLD,
        band_tolerance: float = BAND_TOLERANCE,
        near_tolerance: float = NEAR_TOLERANCE,
    ):
        self.wide_threshold = wide_threshold
        self.band_tolerance = band_tolerance
        self.near_tolerance = near_tolerance

    def classify(self, aspect_ratio: float) -> Classification:
        ratio = ensure_positive(aspect_ratio, "aspect ratio")

        if abs(ratio - self.wide_threshold) <= self.band_tolerance:
            return Classification(aspect_ratio=ratio, is_wide=True)

        return Classification(
            aspect_ratio=ratio,
            is_wide=ratio >= self.wide_threshold - self.near_tolerance,
        )

    def is_wide(self, aspect_ratio: float) -> bool:
        return self.classify(aspect_ratio).is_wide


DEFAULT_CLASSIFIER = AspectRatioClassifier()
