from browser_prompt.selection import SelectionState


def test_starts_at_zero():
    assert SelectionState(3).index == 0


def test_move_down_saturates_at_last_index():
    state = SelectionState(4)
    for _ in range(4 + 5):
        state.move_down()
    assert state.index == 3


def test_move_up_saturates_at_zero():
    state = SelectionState(4)
    state.set_index(3)
    for _ in range(4 + 5):
        state.move_up()
    assert state.index == 0


def test_set_index_clamps():
    state = SelectionState(5)
    assert state.set_index(10) == 4
    assert state.set_index(-3) == 0
    assert state.set_index(2) == 2


def test_empty_list_is_inert():
    hints = []
    state = SelectionState(0, on_scroll=hints.append)
    state.move_down()
    state.move_up()
    state.set_index(7)
    assert state.index == 0
    assert state.is_empty
    assert hints == []


def test_every_transition_requests_scroll():
    hints = []
    state = SelectionState(3, on_scroll=hints.append)
    state.move_down()
    state.move_down()
    state.move_down()
    state.move_up()
    state.set_index(0)
    assert hints == [1, 2, 2, 1, 0]
