"""
Wake-up timer interface used by the poll scheduler.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable


class IWakeupTimer(ABC):
    """A one-shot, replaceable wake-up.

    Arming while armed replaces the pending wake-up; at most one is ever
    pending.
    """

    @abstractmethod
    def arm(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` after ``delay_seconds``, cancelling any pending one."""
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the pending wake-up, if any."""
        pass

    @property
    @abstractmethod
    def is_armed(self) -> bool:
        """Check whether a wake-up is pending."""
        pass

    def shutdown(self) -> None:
        """Release any background resources held by the timer."""
        self.cancel()
