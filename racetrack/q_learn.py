"""Implements the Q-learning algorithm."""

import numpy as np

from racetrack.race import Race, FINISHED
from racetrack.reward import build_reward_field, WALL_REWARD


INIT_VISITS = 100


class QLearning(Race):

    """Implements the Q-learning algorithm for reinforcement learning. The
    car learns while it races: every step updates Q(s, a) for the point it
    just left.

    Q(s, a) is bootstrapped from the action already chosen for the next
    step rather than the greedy one. The learning rate decays per
    acceleration, with visit counts shared across every point of the track.

    Attributes
    ----------
    eps : float
        Exploration chance for epsilon-greedy search

    reward : np.array
        Reward field; shape is (rows, cols)

    q_s_a : np.array
        Q(s, a); shape is (rows, cols, 3, 3)

    visits : np.array
        Times each acceleration has been applied; shape is (3, 3)

    Methods
    -------
    race()

    evaluate()
    """

    def __init__(self,
                 track,
                 gamma,
                 eps=0.1,
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
            Track to train on

        gamma : float
            Discount rate

        eps : float
            Epsilon for epsilon-greedy search, by default 0.1

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

        assert 0 <= eps <= 1, 'Epsilon must be between 0 and 1'
        self.eps = eps

        self.reward = build_reward_field(track)
        self.q_s_a = self.init_q()
        self.visits = np.full((3, 3), INIT_VISITS, dtype=int)

    def init_q(self):
        """Initializes Q(s, a) to zeros

        Returns
        -------
        np.array
            Q(s, a) array; shape is (rows, cols, 3, 3)
        """

        return np.zeros((self.track.dims[0], self.track.dims[1], 3, 3))

    def get_reward(self, point):
        """Reward for landing on a point; off the track counts as a wall"""
        if not self.track.in_bounds(point):
            return WALL_REWARD

        return self.reward[point]

    def learning_rate(self, accel):
        """Learning rate for an acceleration, decaying as it gets used

        Parameters
        ----------
        accel : tuple
            Acceleration (y_acc, x_acc)

        Returns
        -------
        float
            INIT_VISITS / times applied (counting the initial visits)
        """

        return INIT_VISITS / self.visits[self.action_index(accel)]

    def decide_action(self, point):
        """Epsilon-greedy choice of the next acceleration. Exact ties in
        Q(s, a) are settled by a coin flip against the best so far, so later
        actions in the search order win more often.

        Parameters
        ----------
        point : tuple
            Current point (row, col)

        Returns
        -------
        tuple
            Acceleration (y_acc, x_acc)
        """

        if self.rng.random() < self.eps:
            # Randomly choose an action
            return self.poss_actions[self.rng.integers(len(self.poss_actions))]

        best = None
        best_q = -np.inf

        for accel in self.poss_actions:
            q = self.q_s_a[point + self.action_index(accel)]

            if q > best_q:
                best = accel
                best_q = q
            elif q == best_q and self.rng.integers(2) == 1:
                best = accel

        return best

    def update_q(self, prev, accel, rew, point, next_accel, eta):
        """Updates Q(s, a) for the point the car left

        Parameters
        ----------
        prev : tuple
            Point the action was taken from

        accel : tuple
            Acceleration that was applied

        rew : float
            Reward received

        point : tuple
            Point the car is on now

        next_accel : tuple
            Acceleration chosen for the next step

        eta : float
            Learning rate

        Returns
        -------
        float
            Updated Q(s, a)
        """

        q_loc = prev + self.action_index(accel)
        q_next = self.q_s_a[point + self.action_index(next_accel)]

        self.q_s_a[q_loc] = (1 - eta) * self.q_s_a[q_loc] + eta * (rew + self.gamma * q_next)

        return self.q_s_a[q_loc]

    def step(self):
        """Applies the pending action, learns from the outcome, and picks
        the next action

        Returns
        -------
        bool
            Whether the finish line was reached
        """

        accel = self.next_action
        self.visits[self.action_index(accel)] += 1

        prev, landing, status = self.move()

        if status == FINISHED:
            return True

        rew = self.get_reward(landing)
        eta = self.learning_rate(accel)

        point = self.car.pos
        self.next_action = self.decide_action(point)
        self.update_q(prev, accel, rew, point, self.next_action, eta)

        return False
