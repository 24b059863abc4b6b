"""Builds the reward field used as the immediate reward for learning."""

from collections import deque
from itertools import product
import numpy as np

from racetrack.track import WALL, FINISH


DECAY = 1.1
WALL_REWARD = -1


def build_reward_field(track):
    """Propagates finish line reward over the track with a breadth-first
    search seeded from every finish point. Each hop away from the finish
    divides the reward by `DECAY`.

    Walls keep `WALL_REWARD` and the search never expands from them. Open
    points with no path to the finish keep 0.

    Parameters
    ----------
    track : Track
        Track to build the field for

    Returns
    -------
    np.array
        Reward for each point; shape is (rows, cols)
    """

    rows, cols = track.dims
    reward = np.where(track.grid == WALL, float(WALL_REWARD), 0.0)
    reward[track.grid == FINISH] = rows * cols

    touched = track.grid == FINISH
    to_visit = deque(track.finish)
    offsets = list(product((-1, 0, 1), repeat=2))

    while to_visit:
        y, x = to_visit.popleft()

        if track.grid[y, x] == WALL:
            continue

        for d_y, d_x in offsets:
            n_y, n_x = y + d_y, x + d_x

            if not (0 <= n_y < rows and 0 <= n_x < cols):
                continue

            if not touched[n_y, n_x]:
                to_visit.append((n_y, n_x))
                touched[n_y, n_x] = True

            # Take the best decayed reward on offer from the neighbours
            reward[y, x] = max(reward[y, x], reward[n_y, n_x] / DECAY)

    return reward
