from aiogram.fsm.state import State, StatesGroup

class SetupFlow(StatesGroup):
    """FSM состояния для ввода своей суммы ставки"""
    entering_amount = State()
