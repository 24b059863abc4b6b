from racetrack.track import Track
from racetrack.val_iter import ValueIteration
import numpy as np


gamma = 1.0

rng = np.random.default_rng(0)
track = Track.load('L-track.txt', rng=rng)
race = ValueIteration(track, gamma=gamma, tol=0.01, rng=rng, max_race_steps=300, vis=True)

values = race.train()
np.set_printoptions(precision=3, linewidth=200)
print(values)

race.race()
