"""Class for racetrack"""

import os
import numpy as np


WALL = '#'
OPEN = '.'
START = 'S'
FINISH = 'F'

CELL_TYPES = (WALL, OPEN, START, FINISH)


class TrackError(ValueError):
    """Raised when a track definition cannot be loaded."""


class Track():
    """Class for racetrack.

    Attributes
    ----------
    name : string
        Name of the track

    dims : tuple
        Dimensions of track (rows, cols)

    track : list
        Row strings of the track

    grid : np.array
        Array representation of track

    starts : list
        All (row, col) points marked 'S'

    start : tuple
        Spawn point (row, col), picked at random among `starts`

    finish : list
        All (row, col) points marked 'F'

    Methods
    -------
    load()
        Reads a track from a file

    in_bounds()
        Whether a point lies on the track

    get_point()
        Returns the char at a specified point

    open_points()
        Returns all open track points

    render()
        Returns the track as text with the car (optional)

    show()
        Prints the track
    """

    def __init__(self, track_text, name='track', rng=None):
        """Initializes a Track object from its text definition.

        Parameters
        ----------
        track_text : string
            First line `W,H`, then H rows of W characters

        name : string, optional
            Name of the track, by default 'track'

        rng : np.random.Generator, optional
            Random source used to pick the spawn point
        """

        self.name = name
        self.rng = rng if rng is not None else np.random.default_rng()

        width, height, rows = self.parse(track_text)
        self.width = width
        self.height = height
        self.dims = (height, width)
        self.track = rows
        self.grid = np.array([list(row) for row in rows])

        self.starts = self.find_points(START)
        self.finish = self.find_points(FINISH)

        if not self.starts:
            raise TrackError(f'Track {name} has no start cell')

        if not self.finish:
            raise TrackError(f'Track {name} has no finish cell')

        self.start = self.starts[self.rng.integers(len(self.starts))]

    @classmethod
    def load(cls, filename, data_dir='data', rng=None):
        """Reads a track file. Assumes the track file will be in
        `data_dir`.

        Parameters
        ----------
        filename : string
            Filename in the data directory

        data_dir : string, optional
            Directory holding track files, by default 'data'

        rng : np.random.Generator, optional
            Random source used to pick the spawn point

        Returns
        -------
        Track
            Loaded track
        """

        path = os.path.join(data_dir, filename) if data_dir else filename
        with open(path, 'r') as f:
            track_text = f.read()

        name = os.path.splitext(os.path.basename(filename))[0]
        return cls(track_text, name=name, rng=rng)

    @staticmethod
    def parse(track_text):
        """Splits the track text into its dimensions and rows.

        Parameters
        ----------
        track_text : string
            Track definition

        Returns
        -------
        tuple
            (width, height, rows)
        """

        track_split = track_text.splitlines()
        if not track_split:
            raise TrackError('Track definition is empty')

        dims = track_split[0].split(',')
        if len(dims) != 2:
            raise TrackError(f'Bad dimension line: {track_split[0]!r}')

        try:
            width, height = [int(i) for i in dims]
        except ValueError:
            raise TrackError(f'Bad dimension line: {track_split[0]!r}') from None

        if width <= 0 or height <= 0:
            raise TrackError(f'Dimensions must be positive, got {width},{height}')

        body = track_split[1:]
        if len(body) < height:
            raise TrackError(f'Expected {height} rows, found {len(body)}')

        rows = []
        for idx, line in enumerate(body[:height]):
            if len(line) < width:
                raise TrackError(f'Row {idx} is shorter than {width} characters')

            row = line[:width]
            bad = set(row) - set(CELL_TYPES)
            if bad:
                raise TrackError(f'Row {idx} has unknown cells {sorted(bad)}')

            rows.append(row)

        return width, height, rows

    def find_points(self, pt_type):
        """Lists every (row, col) holding `pt_type`, in row-major order"""
        return [tuple(int(i) for i in pt) for pt in np.argwhere(self.grid == pt_type)]

    def open_points(self):
        """Returns an array of the open ('.') points, one (row, col) per row"""
        return np.argwhere(self.grid == OPEN)

    def in_bounds(self, point):
        """Whether the point (row, col) lies on the track"""
        return 0 <= point[0] < self.dims[0] and 0 <= point[1] < self.dims[1]

    def get_point(self, point):
        """Gets the character living at a provided point

        Parameters
        ----------
        point : tuple
            Tuple containing (row, col) to look up in the track

        Returns
        -------
        string
            Character at the provided point
        """

        assert len(point) == 2, 'Point length invalid'
        if not self.in_bounds(point):
            raise IndexError(f'Point {point} is off the track')

        return self.track[point[0]][point[1]]

    def render(self, car=None):
        """Renders the track with the car (optional). A car that is off the
        track is not drawn.

        Parameters
        ----------
        car : tuple, optional
            Location of car (row, col), by default None

        Returns
        -------
        string
            Track rows joined by newlines
        """

        track_car = list(self.track)

        if car is not None and self.in_bounds(car):
            row = list(track_car[car[0]])
            row[car[1]] = 'X'
            track_car[car[0]] = ''.join(row)

        return '\n'.join(track_car)

    def show(self, car=None):
        """Shows the track with the car (optional)"""
        print(self.render(car))
