import pytest

from schedsim.philosophers import (
    PhilosopherState,
    TableState,
    is_deadlocked,
    lock_status,
    new_table,
    toggle_eating,
)

EATING = PhilosopherState.EATING
THINKING = PhilosopherState.THINKING


def test_new_table_is_all_free():
    table = new_table()
    assert table.count == 5
    assert table.chopsticks == (False,) * 5
    assert table.states == (THINKING,) * 5


def test_eating_takes_both_chopsticks():
    before = new_table()
    after = toggle_eating(before, 4)
    assert after.states[4] is EATING
    assert after.chopsticks == (True, False, False, False, True)
    # The previous state is untouched.
    assert before == new_table()


def test_neighbour_cannot_eat_while_chopstick_held():
    table = toggle_eating(new_table(), 0)
    blocked = toggle_eating(table, 1)
    assert blocked is table
    assert blocked.states[1] is THINKING


def test_non_adjacent_philosophers_eat_together():
    table = toggle_eating(toggle_eating(new_table(), 0), 2)
    assert table.states == (EATING, THINKING, EATING, THINKING, THINKING)
    assert table.chopsticks == (True, True, True, True, False)


def test_stop_eating_releases_chopsticks():
    table = toggle_eating(toggle_eating(new_table(), 3), 3)
    assert table == new_table()


def test_deadlock_when_everyone_holds_left_chopstick():
    stuck = TableState(chopsticks=(True,) * 5, states=(THINKING,) * 5)
    assert is_deadlocked(stuck)
    assert not is_deadlocked(new_table())
    assert not is_deadlocked(toggle_eating(new_table(), 2))


def test_lock_status_lines():
    lines = lock_status(toggle_eating(new_table(3), 0))
    assert lines == [
        "Chopstick 1: Locked",
        "Chopstick 2: Locked",
        "Chopstick 3: Unlocked",
    ]


def test_invalid_table_and_index():
    with pytest.raises(ValueError):
        new_table(0)
    with pytest.raises(IndexError):
        toggle_eating(new_table(), 5)
