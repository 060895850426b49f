"""
Conversion of accumulated linear colors to 8-bit output values.

The transform is: average the samples, gamma-correct with gamma 2 (square
root), clamp to [0, 0.999] and scale by 256, truncating to an integer. The
clamp ceiling keeps 256 * value strictly below 256.
"""

from __future__ import annotations
import math
from typing import TextIO, Tuple

import numpy as np

from .vec3 import Color

CLAMP_MAX = 0.999


def _channel_to_byte(value: float) -> int:
    # NaN and negative channels both land on 0
    if not value > 0.0:
        return 0
    return int(256 * min(math.sqrt(value), CLAMP_MAX))


def color_to_rgb8(pixel_color: Color, samples_per_pixel: int) -> Tuple[int, int, int]:
    """Convert a sum of ``samples_per_pixel`` samples to an (r, g, b) byte triple."""
    scale = 1.0 / samples_per_pixel
    return (
        _channel_to_byte(pixel_color.r * scale),
        _channel_to_byte(pixel_color.g * scale),
        _channel_to_byte(pixel_color.b * scale),
    )


def write_color(stream: TextIO, pixel_color: Color, samples_per_pixel: int) -> None:
    """Write one pixel as a ``"r g b"`` line."""
    r, g, b = color_to_rgb8(pixel_color, samples_per_pixel)
    stream.write(f"{r} {g} {b}\n")


def to_ldr(image: np.ndarray) -> np.ndarray:
    """Convert an averaged linear image to 8-bit values.

    Gives the same bytes as color_to_rgb8 for each pixel of an image whose
    values were averaged with the same 1/N scale.

    Args:
        image: Linear image array (float64), already divided by the sample count

    Returns:
        LDR image as uint8 array
    """
    linear = np.nan_to_num(image, nan=0.0)
    corrected = np.sqrt(np.clip(linear, 0.0, None))
    return (256 * np.clip(corrected, 0.0, CLAMP_MAX)).astype(np.uint8)
