import numpy as np

from racetrack.cli import build_parser, main, make_race, run_trials
from racetrack.q_learn import QLearning
from racetrack.track import Track
from racetrack.val_iter import ValueIteration
from conftest import DATA_DIR, SMALL_TRACK


def write_track(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_defaults():
    args = build_parser().parse_args(['L-track.txt'])

    assert args.policy == 'q'
    assert args.runs == 1
    assert args.eps == 0.1
    assert args.gamma is None
    assert not args.bad_crash
    assert args.data_dir == 'data'


def test_make_race_picks_policy():
    track = Track(SMALL_TRACK)
    rng = np.random.default_rng(0)

    q_race = make_race(track, build_parser().parse_args(['x', '--bad-crash']), rng)
    vi_race = make_race(track, build_parser().parse_args(['x', '--policy', 'vi']), rng)

    assert isinstance(q_race, QLearning)
    assert q_race.gamma == 0.8
    assert q_race.bad_crash
    assert isinstance(vi_race, ValueIteration)
    assert vi_race.gamma == 1.0


def test_run_trials(tmp_path):
    path = write_track(tmp_path, 'small.txt', SMALL_TRACK)
    args = build_parser().parse_args([path, '--data-dir', '', '--runs', '3', '--races', '2',
                                      '--max-steps', '100000', '--seed', '1'])

    results = run_trials(args)

    assert results.shape == (3, 2)
    assert np.all(results >= 1)


def test_seed_makes_runs_repeatable(tmp_path):
    path = write_track(tmp_path, 'small.txt', SMALL_TRACK)
    args = build_parser().parse_args([path, '--data-dir', '', '--runs', '2',
                                      '--max-steps', '100000', '--seed', '4'])

    assert np.array_equal(run_trials(args), run_trials(args))


def test_main_saves_results(tmp_path, capsys):
    path = write_track(tmp_path, 'corridor.txt', '8,3\n########\n#S....F#\n########\n')
    out = tmp_path / 'out' / 'steps.npy'

    assert main([path, '--data-dir', '', '--policy', 'vi', '--runs', '2',
                 '--seed', '0', '--out', str(out)]) == 0

    saved = np.load(out)
    assert saved.shape == (2, 1)
    assert np.all(saved >= 5)
    assert 'Mean steps' in capsys.readouterr().out


def test_value_iteration_runs_on_l_track():
    args = build_parser().parse_args(['L-track.txt', '--data-dir', DATA_DIR, '--policy', 'vi',
                                      '--runs', '2', '--max-steps', '5000', '--seed', '0'])

    results = run_trials(args)

    assert results.shape == (2, 1)
    assert np.all(results < 5000)
