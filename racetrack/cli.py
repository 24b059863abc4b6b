"""Runs repeated time trials on a track and reports the steps taken."""

import argparse
import os
import sys
import numpy as np

from racetrack.track import Track
from racetrack.q_learn import QLearning
from racetrack.val_iter import ValueIteration


def build_parser():
    ap = argparse.ArgumentParser(description='Learn to drive a racetrack with Q-learning or value iteration.')
    ap.add_argument('track', help='Track file, relative to --data-dir')
    ap.add_argument('--data-dir', default='data', help='Directory holding track files ("" for none).')
    ap.add_argument('--policy', choices=['q', 'vi'], default='q')
    ap.add_argument('--runs', type=int, default=1, help='Independent runs, each with a fresh track load and policy.')
    ap.add_argument('--races', type=int, default=1, help='Back to back races per run with the same policy.')
    ap.add_argument('--eps', type=float, default=0.1, help='Exploration chance (Q-learning).')
    ap.add_argument('--gamma', type=float, default=None,
                    help='Discount rate; default 0.8 for Q-learning, 1.0 for value iteration.')
    ap.add_argument('--bad-crash', action='store_true', help='Return to the starting line after a crash.')
    ap.add_argument('--tol', type=float, default=0.01, help='Convergence tolerance (value iteration).')
    ap.add_argument('--max-iter', type=int, default=10000, help='Max sweeps (value iteration).')
    ap.add_argument('--max-steps', type=int, default=None, help='Stop a race after this many steps.')
    ap.add_argument('--seed', type=int, default=None)
    ap.add_argument('--out', default=None, help='Save the step counts to this .npy file.')
    ap.add_argument('--vis', action='store_true', help='Draw the track in the console while racing.')
    ap.add_argument('--verbose', action='store_true')
    return ap


def make_race(track, args, rng):
    """Builds the controller selected on the command line"""
    if args.policy == 'q':
        gamma = 0.8 if args.gamma is None else args.gamma
        return QLearning(track,
                         gamma,
                         eps=args.eps,
                         bad_crash=args.bad_crash,
                         rng=rng,
                         max_race_steps=args.max_steps,
                         vis=args.vis,
                         verbose=args.verbose)

    gamma = 1.0 if args.gamma is None else args.gamma
    return ValueIteration(track,
                          gamma=gamma,
                          tol=args.tol,
                          max_iter=args.max_iter,
                          bad_crash=args.bad_crash,
                          rng=rng,
                          max_race_steps=args.max_steps,
                          vis=args.vis,
                          verbose=args.verbose)


def run_trials(args, rng=None):
    """Runs `args.runs` independent runs of `args.races` races each.

    Returns
    -------
    np.array
        Steps taken; shape is (runs, races)
    """

    if rng is None:
        rng = np.random.default_rng(args.seed)

    results = np.zeros((args.runs, args.races), dtype=int)

    for run in range(args.runs):
        track = Track.load(args.track, data_dir=args.data_dir, rng=rng)
        race = make_race(track, args, rng)
        results[run] = race.evaluate(n_races=args.races)
        print(f'Run {run}: ' + '\t'.join(str(steps) for steps in results[run]))

    return results


def main(argv=None):
    args = build_parser().parse_args(argv)
    results = run_trials(args)

    print(f'Mean steps = {np.mean(results):.2f} (std {np.std(results):.2f}) over {results.size} races')

    if args.out is not None:
        out_dir = os.path.dirname(args.out)
        if out_dir and not os.path.exists(out_dir):
            os.makedirs(out_dir)
        np.save(args.out, results)

    return 0


if __name__ == '__main__':
    sys.exit(main())
