"""
Plain-text PPM (P3) image output.

Format:
    P3
    <width> <height>
    <max value>
    r g b            (one line per pixel, top row first, left to right)

The format carries no pixel positions, so rows must be written strictly in
scan order.
"""

from __future__ import annotations
from pathlib import Path
from typing import Iterable, TextIO, Tuple, Union

import numpy as np

from .color import to_ldr


class PPMWriter:
    """Streaming P3 writer that enforces row-major scan order."""

    def __init__(self, stream: TextIO, width: int, height: int, max_value: int = 255):
        self.stream = stream
        self.width = width
        self.height = height
        self.max_value = max_value
        self.rows_written = 0
        self._header_written = False

    def write_header(self) -> None:
        if not self._header_written:
            self.stream.write(f"P3\n{self.width} {self.height}\n{self.max_value}\n")
            self._header_written = True

    def write_row(self, row: Iterable[Tuple[int, int, int]]) -> None:
        """Write the next row of (r, g, b) triples, top row first."""
        if self.rows_written >= self.height:
            raise ValueError(f"All {self.height} rows have already been written")

        pixels = [tuple(int(c) for c in pixel) for pixel in row]
        if len(pixels) != self.width:
            raise ValueError(f"Row has {len(pixels)} pixels, expected {self.width}")

        self.write_header()
        self.stream.write("".join(f"{r} {g} {b}\n" for r, g, b in pixels))
        self.rows_written += 1

    @property
    def complete(self) -> bool:
        return self.rows_written == self.height


def write_ppm(stream: TextIO, ldr_image: np.ndarray, max_value: int = 255) -> None:
    """Write an 8-bit image of shape (height, width, 3) as P3 text."""
    height, width = ldr_image.shape[:2]
    writer = PPMWriter(stream, width, height, max_value)
    writer.write_header()
    for row in ldr_image:
        writer.write_row(row)


def save_image(image: np.ndarray, filename: Union[str, Path]) -> None:
    """Save image to file.

    Args:
        image: Averaged linear image (float) or 8-bit image (uint8)
        filename: Output filename (extension determines format)
    """
    if image.dtype != np.uint8:
        image = to_ldr(image)

    path = Path(filename)
    if path.suffix.lower() == '.ppm':
        with open(path, 'w', newline='\n') as f:
            write_ppm(f, image)
    else:
        from PIL import Image as PILImage

        PILImage.fromarray(np.ascontiguousarray(image)).save(path)
