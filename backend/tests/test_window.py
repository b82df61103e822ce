"""
Tests de la capa de presentación: teclas -> eventos y dibujo del panel.
"""

import numpy as np
import pytest

from moodmusic.core.catalogue import Genre
from moodmusic.core.session import Phase
from moodmusic.ui.window import Intent, SessionWindow, intent_for_key


@pytest.mark.asyncio
async def test_space_starts_camera_when_ready_and_captures_when_recording(machine):
    await machine.initialize()
    assert intent_for_key(ord(' '), machine.snapshot()) == (Intent.START_CAMERA, None)

    await machine.start_camera()
    assert intent_for_key(ord(' '), machine.snapshot()) == (Intent.CAPTURE, None)


def test_genre_keys_cycle_and_select(machine):
    snapshot = machine.snapshot()

    assert intent_for_key(ord('g'), snapshot) == (Intent.CHANGE_GENRE, Genre.ROCK)
    assert intent_for_key(ord('b'), snapshot) == (Intent.CHANGE_GENRE, Genre.METAL)
    assert intent_for_key(ord('4'), snapshot) == (Intent.CHANGE_GENRE, Genre.JAZZ)


def test_other_keys(machine):
    snapshot = machine.snapshot()

    assert intent_for_key(ord('f'), snapshot) == (Intent.SWITCH_CAMERA, None)
    assert intent_for_key(ord('r'), snapshot) == (Intent.RESET, None)
    assert intent_for_key(ord('q'), snapshot) == (Intent.QUIT, None)
    assert intent_for_key(27, snapshot) == (Intent.QUIT, None)
    assert intent_for_key(ord('z'), snapshot) is None


@pytest.mark.asyncio
async def test_render_result_keeps_frame_size(machine, capture):
    await machine.initialize()
    await machine.start_camera()
    await machine.capture()
    window = SessionWindow(machine, capture, size=(240, 320))

    canvas = window.render(machine.snapshot(), np.zeros((480, 640, 3), dtype=np.uint8))

    assert machine.phase is Phase.RESULT
    assert canvas.shape == (480, 640, 3)
    assert canvas.any()


def test_render_without_frame_uses_blank_canvas(machine, capture):
    window = SessionWindow(machine, capture, size=(240, 320))

    canvas = window.render(machine.snapshot(), None)

    assert canvas.shape == (240, 320, 3)


@pytest.mark.asyncio
async def test_dispatch_routes_intents_to_the_session(machine):
    window = SessionWindow(machine, machine.capture_session)
    await machine.initialize()

    await window.dispatch(Intent.START_CAMERA)
    assert machine.phase is Phase.RECORDING

    await window.dispatch(Intent.CHANGE_GENRE, Genre.INDIE)
    await window.dispatch(Intent.CAPTURE)
    assert [song.name for song in machine.snapshot().recommendations] == [
        "Dog Days Are Over - Florence + The Machine",
    ]

    await window.dispatch(Intent.RESET)
    assert machine.phase is Phase.READY
