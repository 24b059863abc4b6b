"""Implements common functionality for the racetrack problem."""

from abc import ABC, abstractmethod
from itertools import product
import os
import time
import numpy as np

from racetrack.car import Car
from racetrack.track import WALL, FINISH


RUNNING = 'running'
RECOVERING = 'recovering'
FINISHED = 'finished'

ACCEL = (-1, 0, 1)


class Race(ABC):

    """Implements common functionality for the racetrack problem.

    Attributes
    ----------
    track : Track
        Track to race on

    car : Car
        Car driven in the current race

    finished : bool
        Whether the last race reached the finish line

    verbose : bool
        Verbosity switch

    learn_curve : list
        Steps taken by each race run through `evaluate()`

    Methods
    -------
    race()

    evaluate()
    """

    def __init__(self,
                 track,
                 gamma,
                 bad_crash=False,
                 rng=None,
                 velocity_range=(-5, 5),
                 accel_succ_prob=0.8,
                 max_race_steps=None,
                 vis=False,
                 vis_delay=0.3,
                 verbose=True):
        """Initializes an object.

        Parameters
        ----------
        track : Track
            Track to race on

        gamma : float
            Discount rate

        bad_crash : bool, optional
            Whether to return to starting line when a crash
            occurs, by default False

        rng : np.random.Generator, optional
            Random source shared by the car and the controller

        velocity_range : tuple, optional
            Limits for velocity, by default (-5, 5)

        accel_succ_prob : float, optional
            Probability that an acceleration will succeed, by default 0.8

        max_race_steps : int, optional
            Max number of steps for racing, by default unlimited

        vis : bool
            Whether to visualize the track in the console when racing

        vis_delay : float
            Seconds to pause between frames when visualizing

        verbose: bool
            Verbosity switch

        """

        assert 0 <= gamma <= 1, 'Discount rate must be between 0 and 1'

        self.track = track
        self.gamma = gamma
        self.bad_crash = bad_crash
        self.rng = rng if rng is not None else np.random.default_rng()
        self.velocity_range = velocity_range
        self.accel_succ_prob = accel_succ_prob
        self.max_race_steps = max_race_steps
        self.vis = vis
        self.vis_delay = vis_delay
        self.verbose = verbose

        # Generate the set of possible acceleration actions in all directions
        self.poss_actions = list(product(ACCEL, repeat=2))

        self.car = None
        self.next_action = None
        self.finished = False
        self.learn_curve = []

    @staticmethod
    def action_index(accel):
        """Index of an acceleration in a (3, 3) action table"""
        return (accel[0] + 1, accel[1] + 1)

    @abstractmethod
    def decide_action(self, point):
        """Abstract method for choosing the acceleration to apply next"""
        raise NotImplementedError('There must be a decide_action method in the child class')

    @abstractmethod
    def step(self):
        """Abstract method for driving the car one step; returns whether the
        finish line was reached"""
        raise NotImplementedError('There must be a step method in the child class')

    def classify(self, point):
        """Classifies a point the car has landed on.

        Parameters
        ----------
        point : tuple
            Point (row, col), possibly off the track

        Returns
        -------
        string
            RECOVERING for a crash, FINISHED for the finish line, otherwise
            RUNNING
        """

        if not self.track.in_bounds(point):
            return RECOVERING

        pt_type = self.track.get_point(point)
        if pt_type == WALL:
            return RECOVERING

        if pt_type == FINISH:
            return FINISHED

        return RUNNING

    def nearest_point(self, point, prev):
        """Finds the open track point nearest to a crash by Manhattan
        distance. Ties go to the point nearest `prev`, then to the first
        one in row-major order.

        Parameters
        ----------
        point : tuple
            Crash point (row, col), possibly off the track

        prev : tuple
            Point the car was on before the crash

        Returns
        -------
        tuple
            Nearest open point, or None if the track has none
        """

        opens = self.track.open_points()
        if len(opens) == 0:
            return None

        dist = np.abs(opens - np.array(point)).sum(axis=1)
        cands = opens[dist == dist.min()]

        prev_dist = np.abs(cands - np.array(prev)).sum(axis=1)
        nearest = cands[np.argmin(prev_dist)]

        return (int(nearest[0]), int(nearest[1]))

    def recover(self, prev):
        """Puts the car back on the track after a crash. Crash behavior
        depends on `bad_crash`.

        Parameters
        ----------
        prev : tuple
            Point the car was on before the crash
        """

        crash = self.car.pos

        if self.bad_crash:
            self.car.reset()
            return

        nearest = self.nearest_point(crash, prev)

        # Nowhere to go but the starting line
        if nearest is None:
            self.car.reset()
        else:
            self.car.reset(nearest)

        if self.verbose:
            print(f'The nearest point to {crash} is {self.car.pos}')

    def move(self):
        """Applies the pending action to the car and handles a crash.

        Returns
        -------
        tuple
            (previous point, landing point, status) where status is one of
            RUNNING, RECOVERING or FINISHED
        """

        prev = self.car.pos
        landing = self.car.apply_acceleration(self.next_action)
        status = self.classify(landing)

        if status == RECOVERING:
            self.recover(prev)

        return prev, landing, status

    def new_race(self):
        """Puts a fresh car on the starting line and picks its first action"""
        self.car = Car(self.track.start,
                       rng=self.rng,
                       velocity_range=self.velocity_range,
                       accel_succ_prob=self.accel_succ_prob)
        self.next_action = self.decide_action(self.car.pos)
        self.finished = False

    def race(self):
        """Runs a time trial, stepping until the finish line is reached
        (or `max_race_steps` have been taken)

        Returns
        -------
        int
            Number of moves that the time trial was completed in
        """

        self.new_race()

        if self.vis:
            self.track.show(self.car.pos)

        while not self.finished:
            self.finished = self.step()

            if self.vis:
                os.system('clear')
                print(f'Step: {self.car.time}')
                self.track.show(self.car.pos)
                print(f'Velocity = {self.car.vel}')
                time.sleep(self.vis_delay)

            if self.max_race_steps is not None and self.car.time >= self.max_race_steps:
                if not self.finished and self.verbose:
                    print(f'Failed to find finish in less than {self.max_race_steps} steps')
                break

        if self.verbose and self.finished:
            print(f'\nTime trial completed in {self.car.time} steps')

        return self.car.time

    def evaluate(self, n_races=20):
        """Runs n races back to back with the same controller.

        Parameters
        ----------
        n_races : int
            Number of races to run; default 20

        Returns
        -------
        results : list
            Steps taken by each race
        """

        results = [None]*n_races

        for idx in range(n_races):
            results[idx] = self.race()

        self.learn_curve.extend(results)

        return results
