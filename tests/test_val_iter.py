import numpy as np
import pytest

from racetrack.track import Track
from racetrack.val_iter import ValueIteration, generate_values
from conftest import FixedRng, SMALL_TRACK


CORRIDOR = '8,3\n########\n#S....F#\n########\n'

ROW = '4,1\nS..F\n'


def test_row_values():
    values = generate_values(Track(ROW), tol=0.01, gamma=1)

    # Fixed point of the backup on a single row
    assert values[0] == pytest.approx([0.0776, 0.2063, 0.2857, 1.2857], abs=0.02)


def test_corridor_values_rise_toward_finish():
    track = Track(CORRIDOR)
    values = generate_values(track, tol=0.01, gamma=1)

    lane = values[1, 1:7]
    assert np.all(np.diff(lane) > 0)
    assert lane[-1] > 1
    assert np.all(values[track.grid == '#'] == 0)


def corridor(length):
    """Single lane of `length` points from S to F, walled in"""
    width = length + 2
    lane = '#S' + '.' * (length - 2) + 'F#'
    return f'{width},3\n' + '#' * width + '\n' + lane + '\n' + '#' * width + '\n'


@pytest.mark.parametrize('length', [3, 6, 10, 14, 20])
def test_corridor_rollout_without_slips(length):
    track = Track(corridor(length))
    race = ValueIteration(track, gamma=1, tol=0.01, rng=FixedRng(randoms=(0.5,)),
                          max_race_steps=500, verbose=False)

    steps = race.race()

    assert race.finished
    assert steps == length - 1
    assert race.car.pos == (1, length)


def test_flat_values_head_for_finish():
    track = Track(corridor(20))
    race = ValueIteration(track, values=np.zeros(track.dims), rng=FixedRng(), verbose=False)

    assert race.best_offset((1, 1)) == (0, 1)
    assert race.best_offset((1, 10)) == (0, 1)


def test_l_track_rollout_finishes(l_track):
    race = ValueIteration(l_track, gamma=1, tol=0.01, rng=np.random.default_rng(0),
                          max_race_steps=5000, verbose=False)

    results = race.evaluate(n_races=3)

    assert race.finished
    assert all(steps < 5000 for steps in results)


def test_solver_is_pure():
    track = Track(CORRIDOR)
    grid = track.grid.copy()
    values = generate_values(track, tol=0.01, gamma=1)

    assert np.array_equal(values, generate_values(track, tol=0.01, gamma=1))
    assert np.array_equal(track.grid, grid)


def test_no_discount_leaves_reward():
    values = generate_values(Track(SMALL_TRACK), tol=0.01, gamma=0)

    expected = np.zeros((3, 3))
    expected[0, 0] = 1
    assert np.array_equal(values, expected)


def test_non_convergence_warns():
    with pytest.warns(RuntimeWarning, match='without converging'):
        values = generate_values(Track(CORRIDOR), tol=1e-12, gamma=1, max_iter=2)

    assert values.shape == (3, 8)


def test_invalid_settings():
    with pytest.raises(AssertionError):
        generate_values(Track(ROW), tol=0)

    with pytest.raises(AssertionError):
        ValueIteration(Track(ROW), gamma=-0.5)


def test_train_stores_values():
    race = ValueIteration(Track(ROW), verbose=False)

    assert race.values is None
    values = race.train()

    assert race.values is values
    assert values[0, 3] == values.max()


def test_precomputed_values_are_used():
    values = np.array([[0.0, 5.0, 1.0, 2.0]])
    race = ValueIteration(Track(ROW), values=values, rng=FixedRng(), verbose=False)
    race.new_race()

    assert race.best_offset((0, 0)) == (0, 1)
    assert race.best_offset((0, 2)) == (0, -1)
    assert race.next_action == (0, 1)


def test_action_accounts_for_velocity():
    values = np.array([[0.0, 1.0, 2.0, 3.0]])
    race = ValueIteration(Track(ROW), values=values, rng=FixedRng(), verbose=False)
    race.new_race()

    race.car.vel = (0, 1)
    assert race.decide_action((0, 1)) == (0, 0)

    race.car.vel = (0, 3)
    assert race.decide_action((0, 1)) == (0, -1)

    race.car.vel = (0, -2)
    assert race.decide_action((0, 1)) == (0, 1)


def test_walls_are_never_targets():
    track = Track('3,3\n.#.\n#S#\n.#F\n')
    values = np.zeros((3, 3))
    values[track.grid == '#'] = 9.0
    values[1, 1] = 0.5
    values[2, 2] = 1.0
    race = ValueIteration(track, values=values, rng=FixedRng(), verbose=False)

    assert race.best_offset((1, 1)) == (1, 1)


def test_crash_recovery_in_rollout():
    track = Track('5,3\n#####\n#S.F#\n#####\n')
    race = ValueIteration(track, rng=FixedRng(), verbose=False)
    race.new_race()

    race.next_action = (-1, 0)
    assert not race.step()
    assert race.car.pos == (1, 2)
    assert race.car.vel == (0, 0)


def test_rollout_finishes_with_slips():
    rng = np.random.default_rng(5)
    track = Track(CORRIDOR, rng=rng)
    race = ValueIteration(track, gamma=1, rng=rng, verbose=False)

    results = race.evaluate(n_races=10)

    assert all(steps >= 5 for steps in results)
    assert race.finished
