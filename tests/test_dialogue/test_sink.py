import pytest
import pygame
from narrator.core.actions import Action
from narrator.core.events import PresentationEvent
from narrator.dialogue.content import BoundChoice
from narrator.dialogue.sink import StateSink


@pytest.fixture
def state_sink(event_bus):
    return StateSink(event_bus)


def test_hide_when_nothing_shown_is_noop(state_sink):
    state_sink.hide()
    state_sink.hide()
    assert not state_sink.visible

def test_show_replaces_previous(state_sink):
    state_sink.show("first", "/a.jpg", "Alice")
    state_sink.show("second", "/b.jpg", "Bob")

    assert state_sink.state.message == "second"
    assert state_sink.state.speaker_name == "Bob"
    assert state_sink.state.choices is None

def test_hide_clears_state(state_sink):
    state_sink.show("m", "/a.jpg", "Alice", [BoundChoice("x")])
    state_sink.hide()

    assert not state_sink.visible
    assert state_sink.state.message == ""
    assert state_sink.state.choices is None

def test_events(state_sink, event_bus):
    received = []
    def handler(event):
        received.append(event.type)

    event_bus.subscribe(PresentationEvent.MESSAGE_SHOWN, handler)
    event_bus.subscribe(PresentationEvent.MESSAGE_HIDDEN, handler)

    state_sink.hide()
    state_sink.show("m", "", "")
    state_sink.hide()
    state_sink.hide()

    assert received == [PresentationEvent.MESSAGE_SHOWN, PresentationEvent.MESSAGE_HIDDEN]

def test_choice_navigation(state_sink):
    picked = []
    state_sink.show("m", "", "", [
        BoundChoice("a", lambda: picked.append("a")),
        BoundChoice("b", lambda: picked.append("b")),
        BoundChoice("c", lambda: picked.append("c")),
    ])

    state_sink.select_prev()
    assert state_sink.state.selected_choice == 2
    state_sink.select_next()
    state_sink.select_next()
    assert state_sink.state.selected_choice == 1

    assert state_sink.confirm()
    assert picked == ["b"]

def test_choose_out_of_range(state_sink):
    state_sink.show("m", "", "", [BoundChoice("a")])
    with pytest.raises(IndexError):
        state_sink.choose(3)

def test_choose_without_choices(state_sink):
    assert not state_sink.choose(0)
    state_sink.show("m", "", "")
    assert not state_sink.confirm()

def test_handle_action_and_key(state_sink):
    picked = []
    state_sink.show("m", "", "", [
        BoundChoice("a", lambda: picked.append("a")),
        BoundChoice("b", lambda: picked.append("b")),
    ])

    assert state_sink.handle_action(Action.MENU_DOWN)
    assert not state_sink.handle_action(Action.CANCEL)
    assert state_sink.handle_key(pygame.K_RETURN)
    assert not state_sink.handle_key(pygame.K_F12)

    assert picked == ["b"]

def test_actions_ignored_without_choices(state_sink):
    state_sink.show("m", "", "")
    assert not state_sink.handle_action(Action.CONFIRM)
