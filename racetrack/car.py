"""Vehicle state and dynamics for the racetrack problem."""

import numpy as np


class Car():
    """Vehicle driving on the racetrack. The car knows nothing about the
    track; it may move off the grid or into a wall, and the controller
    driving it decides what that means.

    Attributes
    ----------
    start : tuple
        Spawn point (row, col)

    pos : tuple
        Current point (row, col)

    vel : tuple
        Current velocity (y_vel, x_vel)

    accel : tuple
        Acceleration applied on the last step (y_acc, x_acc)

    time : int
        Number of accelerations applied so far

    Methods
    -------
    apply_acceleration()

    reset()
    """

    def __init__(self,
                 start,
                 rng=None,
                 velocity_range=(-5, 5),
                 accel_succ_prob=0.8):
        """Initializes a car at rest on its spawn point.

        Parameters
        ----------
        start : tuple
            Spawn point (row, col)

        rng : np.random.Generator, optional
            Random source for acceleration slips

        velocity_range : tuple, optional
            Limits for velocity, by default (-5, 5)

        accel_succ_prob : float, optional
            Probability that an acceleration will succeed, by default 0.8
        """

        self.start = (int(start[0]), int(start[1]))
        self.rng = rng if rng is not None else np.random.default_rng()
        self.velocity_range = velocity_range
        self.accel_succ_prob = accel_succ_prob

        self.pos = self.start
        self.vel = (0, 0)
        self.accel = (0, 0)
        self.time = 0

    def __clamp(self, v):
        return min(max(v, self.velocity_range[0]), self.velocity_range[1])

    def apply_acceleration(self, accel):
        """Applies an acceleration, then moves the car by its new velocity.
        The acceleration may fail, in which case it is treated as (0, 0).

        Parameters
        ----------
        accel : tuple
            Acceleration (y_acc, x_acc)

        Returns
        -------
        tuple
            New point (row, col)
        """

        # The acceleration action may fail
        if self.accel_succ_prob < self.rng.random():
            self.accel = (0, 0)
        else:
            self.accel = (int(accel[0]), int(accel[1]))

        # Generate velocity subject to limits
        v_y = self.__clamp(self.vel[0] + self.accel[0])
        v_x = self.__clamp(self.vel[1] + self.accel[1])
        self.vel = (v_y, v_x)

        self.pos = (self.pos[0] + v_y, self.pos[1] + v_x)
        self.time += 1

        return self.pos

    def reset(self, point=None):
        """Stops the car and moves it to `point`, or back to its spawn
        point. The time counter keeps running.

        Parameters
        ----------
        point : tuple, optional
            Point (row, col) to move to, by default the spawn point
        """

        self.pos = self.start if point is None else (int(point[0]), int(point[1]))
        self.vel = (0, 0)
        self.accel = (0, 0)
