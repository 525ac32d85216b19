from __future__ import annotations

from typing import Optional


class SchedulingError(ValueError):
    """
    Base class for every precondition failure of a scheduling run.
    """


class InvalidProcess(SchedulingError):
    def __init__(self, message: str, pid: Optional[str] = None) -> None:
        super().__init__(message)
        self.pid = pid


class InvalidQuantum(SchedulingError):
    pass


class InvalidContextSwitch(SchedulingError):
    pass


class EmptyProcessSet(SchedulingError):
    pass
