"""FSM states for the staff bot."""

from aiogram.fsm.state import State, StatesGroup


class CountState(StatesGroup):
    """FSM states for a stock count."""

    counting = State()
    searching = State()
    entering_qty = State()
    comparing = State()
    applying = State()


class StoreState(StatesGroup):
    choosing = State()
