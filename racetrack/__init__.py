"""Racetrack driving with Q-learning and value iteration."""
