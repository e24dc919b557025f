"""Progress reporting for batch segment creation."""

from typing import Optional, Protocol

from tqdm import tqdm


class ProgressReporter(Protocol):
    def report(self, current: int, total: int) -> bool:
        """Record progress; return True to request cancellation."""
        ...


class TqdmProgressReporter:
    """tqdm progress bar; optionally requests cancellation after
    ``cancel_after`` segments."""

    def __init__(self, desc: str = "Forging ring", cancel_after: Optional[int] = None,
                 disable: bool = False):
        self.desc = desc
        self.cancel_after = cancel_after
        self.disable = disable
        self._bar = None

    def report(self, current: int, total: int) -> bool:
        if self._bar is None or self._bar.total != total:
            self.close()
            self._bar = tqdm(total=total, desc=self.desc, unit="segment",
                             disable=self.disable)
        self._bar.n = current
        self._bar.refresh()
        if current >= total:
            self.close()
        return self.cancel_after is not None and current >= self.cancel_after

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
