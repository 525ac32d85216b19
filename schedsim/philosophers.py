"""
Dining philosophers table used to demonstrate mutual exclusion and deadlock.

Philosopher ``i`` sits between chopstick ``i`` (left) and chopstick
``(i + 1) % count`` (right). Transitions are pure: every call returns a new
:class:`TableState` and never touches the old one.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Tuple

DEFAULT_PHILOSOPHERS = 5


class PhilosopherState(Enum):
    THINKING = "thinking"
    EATING = "eating"


@dataclass(frozen=True)
class TableState:
    chopsticks: Tuple[bool, ...]
    states: Tuple[PhilosopherState, ...]

    @property
    def count(self) -> int:
        return len(self.states)

    def neighbours(self, i: int) -> Tuple[int, int]:
        if not 0 <= i < self.count:
            raise IndexError(f"No philosopher {i} at a table of {self.count}")
        return i, (i + 1) % self.count


def new_table(count: int = DEFAULT_PHILOSOPHERS) -> TableState:
    if count < 1:
        raise ValueError(f"A table needs at least one philosopher, got {count}")
    return TableState(
        chopsticks=(False,) * count,
        states=(PhilosopherState.THINKING,) * count,
    )


def toggle_eating(state: TableState, i: int) -> TableState:
    """
    Start or stop philosopher ``i`` eating.

    An eating philosopher puts both chopsticks down. A thinking one picks up
    both at once, or nothing at all when either is held; in that case the
    same state is returned.
    """
    left, right = state.neighbours(i)
    chopsticks = list(state.chopsticks)
    states = list(state.states)

    if states[i] is PhilosopherState.EATING:
        states[i] = PhilosopherState.THINKING
        chopsticks[left] = False
        chopsticks[right] = False
    elif not chopsticks[left] and not chopsticks[right]:
        states[i] = PhilosopherState.EATING
        chopsticks[left] = True
        chopsticks[right] = True
    else:
        return state

    return replace(state, chopsticks=tuple(chopsticks), states=tuple(states))


def is_deadlocked(state: TableState) -> bool:
    """
    True when nobody eats and every philosopher's left chopstick is held,
    i.e. everyone is stuck waiting for the right one.
    """
    return all(
        s is not PhilosopherState.EATING and state.chopsticks[i]
        for i, s in enumerate(state.states)
    )


def lock_status(state: TableState) -> List[str]:
    return [
        f"Chopstick {i + 1}: {'Locked' if held else 'Unlocked'}"
        for i, held in enumerate(state.chopsticks)
    ]
