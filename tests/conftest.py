from itertools import cycle
import os

import pytest

from racetrack.track import Track


DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'data')

SMALL_TRACK = '3,3\nF..\n...\n..S\n'


class FixedRng():
    """Generator stand-in returning canned draws in a loop"""

    def __init__(self, randoms=(0.5,), ints=(0,)):
        self.randoms = cycle(randoms)
        self.ints = cycle(ints)

    def random(self):
        return next(self.randoms)

    def integers(self, *args, **kwargs):
        return next(self.ints)


@pytest.fixture
def no_slip():
    return FixedRng(randoms=(0.5,), ints=(0,))


@pytest.fixture
def small_track():
    return Track(SMALL_TRACK, name='small')


@pytest.fixture
def l_track():
    return Track.load('L-track.txt', data_dir=DATA_DIR, rng=FixedRng())
