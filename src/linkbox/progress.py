from __future__ import annotations

from typing import TextIO

import tqdm


class ProgressBar:
    """Progress observer for SendSession that renders with tqdm."""

    def __init__(self, description: str = "Sending", file: TextIO | None = None, disable: bool = False):
        self.description = description
        self.file = file
        self.disable = disable
        self._bar: tqdm.tqdm | None = None
        self._last = 0

    def __call__(self, transferred: int, total: int) -> None:
        if self._bar is None:
            self._bar = tqdm.tqdm(
                total=total,
                desc=self.description,
                unit="B",
                unit_scale=True,
                unit_divisor=1024,
                file=self.file,
                disable=self.disable,
            )
        self._bar.update(transferred - self._last)
        self._last = transferred
        if transferred >= total:
            self.close()

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
        self._last = 0

    def __enter__(self) -> "ProgressBar":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
