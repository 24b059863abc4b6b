from racetrack.track import Track
from racetrack.q_learn import QLearning
import numpy as np


gamma = 0.8
eps = 0.1

rng = np.random.default_rng(0)
track = Track.load('L-track.txt', rng=rng)
race = QLearning(track,
                 gamma,
                 eps=eps,
                 bad_crash=True,
                 rng=rng,
                 max_race_steps=10000,
                 verbose=False)

learn_curve = race.evaluate(n_races=100)
print(learn_curve)

np.save(f'Learn_curve_Q_{track.name}.npy', learn_curve)
