"""Penalty score used to pick the mask pattern (lower is better)."""

from collections import deque
from dataclasses import dataclass

import numpy as np

from qrgen.builder import GridView

PENALTY_N1 = 3
PENALTY_N2 = 3
PENALTY_N3 = 40
PENALTY_N4 = 10

# Non-tight upper bound given the weights above
MAX_PENALTY = 2_568_888


@dataclass(frozen=True)
class PenaltyScore:
    """Penalty terms of one grid."""

    n1: int  # runs of five or more same-coloured modules
    n2: int  # 2*2 same-coloured blocks
    n3: int  # finder-like patterns
    n4: int  # dark/light imbalance

    @property
    def total(self) -> int:
        return self.n1 + self.n2 + self.n3 + self.n4


def _runs(line: np.ndarray) -> np.ndarray:
    """Run lengths of ``line``, alternating colours, starting with a light run.

    The first run is empty when the line starts dark.
    """
    changes = np.flatnonzero(line[1:] != line[:-1]) + 1
    bounds = np.concatenate(([0], changes, [line.size]))
    lengths = np.diff(bounds)
    if line[0]:
        lengths = np.concatenate(([0], lengths))
    return lengths


def _count_finder_patterns(history: deque) -> int:
    """Finder-like patterns ending at the light run just added (0, 1 or 2)."""
    n = history[1]
    core = (n > 0 and history[2] == n and history[3] == n * 3
            and history[4] == n and history[5] == n)
    return (int(core and history[0] >= n * 4 and history[6] >= n)
            + int(core and history[6] >= n * 4 and history[0] >= n))


def _line_penalty(line: np.ndarray, size: int) -> tuple[int, int]:
    """N1 and N3 penalties of one row or column."""
    runs = [int(r) for r in _runs(line)]
    n1 = sum(PENALTY_N1 + r - 5 for r in runs if r >= 5)

    # Newest run first; the area outside the symbol counts as light
    history = deque([0] * 7, maxlen=7)
    finders = 0
    for i, run in enumerate(runs[:-1]):
        history.appendleft(run + size if i == 0 else run)
        if i % 2 == 0:  # a light run just ended
            finders += _count_finder_patterns(history)

    last = runs[-1]
    if len(runs) % 2 == 0:  # line ends dark
        history.appendleft(last)
        history.appendleft(size)
    else:
        history.appendleft(last + size)
    finders += _count_finder_patterns(history)
    return n1, finders * PENALTY_N3


def penalty_breakdown(view: GridView) -> PenaltyScore:
    """Compute each penalty term over the grid."""
    modules = view.modules
    size = view.size

    n1 = n3 = 0
    for line in (*modules, *modules.T):
        a, b = _line_penalty(line, size)
        n1 += a
        n3 += b

    # 2*2 blocks of one colour
    tl = modules[:-1, :-1]
    same = (tl == modules[:-1, 1:]) & (tl == modules[1:, :-1]) & (tl == modules[1:, 1:])
    n2 = int(np.count_nonzero(same)) * PENALTY_N2

    # Smallest k >= 0 such that (45-5k)% <= dark/total <= (55+5k)%
    total = view.total_count
    dark = view.dark_count
    k = (abs(dark * 20 - total * 10) + total - 1) // total - 1
    assert 0 <= k <= 9
    n4 = k * PENALTY_N4

    return PenaltyScore(n1, n2, n3, n4)


def get_penalty_score(view: GridView) -> int:
    """Total penalty of the grid, as used for automatic mask selection."""
    result = penalty_breakdown(view).total
    assert 0 <= result <= MAX_PENALTY
    return result
