"""Implements the Value Iteration algorithm."""

from itertools import product
import warnings
import numpy as np

from racetrack.race import Race, FINISHED
from racetrack.reward import build_reward_field
from racetrack.track import WALL, FINISH


# Chance the car stays put vs. drifts to each neighbour of its landing point
STAY_PROB = 0.2
DRIFT_PROB = 0.1

OFFSETS = list(product((-1, 0, 1), repeat=2))


def _shift(arr, d_y, d_x, fill):
    """Returns `out` with out[r, c] = arr[r + d_y, c + d_x], and `fill` where
    that falls off the edge"""

    rows, cols = arr.shape
    out = np.full(arr.shape, fill, dtype=float)
    out[max(-d_y, 0):rows + min(-d_y, 0), max(-d_x, 0):cols + min(-d_x, 0)] = \
        arr[max(d_y, 0):rows + min(d_y, 0), max(d_x, 0):cols + min(d_x, 0)]

    return out


def generate_values(track, tol=0.01, gamma=1.0, max_iter=10000, verbose=False):
    """Value iteration over the points of the track. The reward is 1 on the
    finish line and 0 elsewhere; walls keep a value of 0.

    Each sweep backs every track point up from the previous sweep's table:
    V(s) = R(s) + gamma * max over landing points l around s of E[V | l],
    where E[V | l] weighs l itself by STAY_PROB and each of its in-bounds,
    non-wall neighbours by DRIFT_PROB.

    Parameters
    ----------
    track : Track
        Track to plan on

    tol : float
        Stop once the largest change in a sweep is at most `tol`

    gamma : float
        Discount rate

    max_iter : int
        Maximum number of sweeps; exceeding it warns and returns the
        current table

    verbose : bool
        Verbosity switch

    Returns
    -------
    np.array
        Value of each point; shape is (rows, cols)
    """

    assert tol > 0, 'Tolerance must be positive'
    assert 0 <= gamma <= 1, 'Discount rate must be between 0 and 1'

    on_track = track.grid != WALL
    reward = np.where(track.grid == FINISH, 1.0, 0.0)
    v = reward.copy()

    t = 0
    while True:
        t += 1
        v_last = v.copy()

        # Expected value of the cells around each landing point
        v_track = np.where(on_track, v_last, 0.0)
        expect = STAY_PROB * v_track
        for d_y, d_x in OFFSETS:
            if (d_y, d_x) != (0, 0):
                expect += DRIFT_PROB * _shift(v_track, d_y, d_x, 0.0)

        # Walls are never landing points
        expect = np.where(on_track, expect, -np.inf)

        best = np.full(v.shape, -np.inf)
        for d_y, d_x in OFFSETS:
            best = np.maximum(best, _shift(expect, d_y, d_x, -np.inf))
        best = np.where(on_track, best, 0.0)

        v = np.where(on_track, reward + gamma * best, 0.0)

        max_delta_v = np.max(np.abs(v - v_last))
        if verbose:
            print(f'Epoch = {t}, max_delta_v = {max_delta_v}')

        if max_delta_v <= tol:
            if verbose:
                print('Stopped because training converged')
            break

        if max_iter is not None and t >= max_iter:
            warnings.warn(f'Value iteration stopped after {max_iter} sweeps '
                          f'without converging (max_delta_v = {max_delta_v})',
                          RuntimeWarning)
            break

    return v


class ValueIteration(Race):

    """Races with a value table found by value iteration. Each step heads for
    the most valuable point around the car. Points of equal value are ranked
    by the reward field, so the car keeps closing in on the finish line where
    the table is still flat.

    Attributes
    ----------
    values : np.array
        Value table; computed by `train()` unless passed in

    reward : np.array
        Reward field used to rank points of equal value

    Methods
    -------
    train()

    race()

    evaluate()
    """

    def __init__(self,
                 track,
                 gamma=1.0,
                 tol=0.01,
                 max_iter=10000,
                 values=None,
                 bad_crash=False,
                 rng=None,
                 velocity_range=(-5, 5),
                 accel_succ_prob=0.8,
                 max_race_steps=None,
                 vis=False,
                 vis_delay=0.2,
                 verbose=True):
        """Initializes an object.

        Parameters
        ----------
        track : Track
            Track to train on

        gamma : float
            Discount rate

        tol : float
            Tolerance for stopping

        max_iter : int
            Maximum number of sweeps

        values : np.array, optional
            Precomputed value table, used instead of training

        bad_crash : bool, optional
            Whether to return to starting line when a crash
            occurs, by default False

        rng : np.random.Generator, optional
            Random source for the car

        velocity_range : tuple, optional
            Limits for velocity, by default (-5, 5)

        accel_succ_prob : float, optional
            Probability that an acceleration will succeed, by default 0.8

        max_race_steps : int, optional
            Max number of steps for racing, by default unlimited

        vis : bool
            Whether to visualize the track in the console

        vis_delay : float
            Seconds to pause between frames when visualizing

        verbose: bool
            Verbosity switch

        """
        super().__init__(track=track,
                         gamma=gamma,
                         bad_crash=bad_crash,
                         rng=rng,
                         velocity_range=velocity_range,
                         accel_succ_prob=accel_succ_prob,
                         max_race_steps=max_race_steps,
                         vis=vis,
                         vis_delay=vis_delay,
                         verbose=verbose)

        assert tol > 0, 'Tolerance must be positive'
        self.tol = tol
        self.max_iter = max_iter
        self.values = values
        self.reward = build_reward_field(track)

    def train(self):
        """Develops a value table with the Value Iteration algorithm

        Returns
        -------
        np.array
            Value of each point
        """

        self.values = generate_values(self.track,
                                      tol=self.tol,
                                      gamma=self.gamma,
                                      max_iter=self.max_iter,
                                      verbose=self.verbose)

        return self.values

    def best_offset(self, point):
        """Offset to the most valuable track point in the 3x3 neighbourhood
        of `point`. Equal values go to the point with the higher reward, i.e.
        fewer hops from the finish line; the first one found wins any
        remaining tie.

        Parameters
        ----------
        point : tuple
            Current point (row, col)

        Returns
        -------
        tuple
            Offset (d_y, d_x) to the chosen point
        """

        best = (0, 0)
        best_key = (-np.inf, -np.inf)

        for d_y, d_x in self.poss_actions:
            cand = (point[0] + d_y, point[1] + d_x)
            if not self.track.in_bounds(cand) or self.track.get_point(cand) == WALL:
                continue

            key = (self.values[cand], self.reward[cand])
            if key > best_key:
                best = (d_y, d_x)
                best_key = key

        return best

    def decide_action(self, point):
        """Picks the acceleration that turns the car's velocity into the
        offset of the best neighbouring point, one unit per axis at most

        Parameters
        ----------
        point : tuple
            Current point (row, col)

        Returns
        -------
        tuple
            Acceleration (y_acc, x_acc)
        """

        if self.values is None:
            self.train()

        target = self.best_offset(point)
        vel = self.car.vel

        return (int(np.clip(target[0] - vel[0], -1, 1)),
                int(np.clip(target[1] - vel[1], -1, 1)))

    def step(self):
        """Applies the pending action and picks the next one

        Returns
        -------
        bool
            Whether the finish line was reached
        """

        _, _, status = self.move()

        if status == FINISHED:
            return True

        self.next_action = self.decide_action(self.car.pos)

        return False
