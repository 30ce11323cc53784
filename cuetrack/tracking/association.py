"""
Frame-to-frame data association

Provides:
- Pairwise Euclidean distance matrix between predictions and observations
- Greedy nearest-neighbour assignment (deterministic)
- Optimal assignment via the Hungarian algorithm
- associate(): gated one-to-one matching with unmatched bookkeeping
"""

from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np
from scipy.optimize import linear_sum_assignment

from ..core.config import AssociationAlgorithm
from ..core.constants import DISTANCE_TOLERANCE

# Cost assigned to pairs outside the gate before solving
_GATED_COST = 1e9


@dataclass(frozen=True)
class AssociationResult:
    """
    Outcome of one association pass

    Attributes:
        matches: (track_index, observation_index) pairs, sorted by track index
        unmatched_tracks: Track indices without an observation
        unmatched_observations: Observation indices without a track
    """
    matches: Tuple[Tuple[int, int], ...] = ()
    unmatched_tracks: Tuple[int, ...] = ()
    unmatched_observations: Tuple[int, ...] = ()


def distance_matrix(predicted: np.ndarray, observed: np.ndarray) -> np.ndarray:
    """
    Compute pairwise Euclidean distances

    Args:
        predicted: (N, 3) predicted track positions
        observed: (M, 3) observed positions

    Returns:
        (N, M) distance matrix
    """
    predicted = np.asarray(predicted, dtype=np.float64).reshape(-1, 3)
    observed = np.asarray(observed, dtype=np.float64).reshape(-1, 3)

    diff = predicted[:, np.newaxis, :] - observed[np.newaxis, :, :]
    return np.sqrt(np.sum(diff ** 2, axis=2))


def greedy_assignment(distances: np.ndarray, gate: float) -> List[Tuple[int, int]]:
    """
    Greedy nearest-neighbour matching

    Tracks are visited in row order; each takes the nearest still-free
    observation inside the gate. Ties go to the lower observation index.

    Args:
        distances: (N, M) distance matrix
        gate: Maximum association distance (inclusive)

    Returns:
        List of (track_index, observation_index) pairs
    """
    matches = []
    taken = set()
    limit = gate + DISTANCE_TOLERANCE

    for t in range(distances.shape[0]):
        best = None
        best_distance = np.inf
        for o in range(distances.shape[1]):
            if o in taken:
                continue
            d = distances[t, o]
            if d > limit:
                continue
            # Strictly better by more than the tolerance, so ties keep the lower index
            if best is None or d < best_distance - DISTANCE_TOLERANCE:
                best = o
                best_distance = d
        if best is not None:
            taken.add(best)
            matches.append((t, best))

    return matches


def optimal_assignment(distances: np.ndarray, gate: float) -> List[Tuple[int, int]]:
    """
    Minimum-total-distance matching using the Hungarian algorithm

    Out-of-gate pairs get a prohibitive cost and are filtered after solving.

    Args:
        distances: (N, M) distance matrix
        gate: Maximum association distance (inclusive)

    Returns:
        List of (track_index, observation_index) pairs
    """
    if min(distances.shape) == 0:
        return []

    limit = gate + DISTANCE_TOLERANCE
    cost = np.where(distances <= limit, distances, _GATED_COST)
    row_ind, col_ind = linear_sum_assignment(cost)

    # Filter out pairs that were only assigned because they had to be
    return [
        (int(r), int(c))
        for r, c in zip(row_ind, col_ind)
        if distances[r, c] <= limit
    ]


def associate(
    predicted: np.ndarray,
    observed: np.ndarray,
    gate: float,
    algorithm: Union[AssociationAlgorithm, str] = AssociationAlgorithm.GREEDY_NEAREST_NEIGHBOR
) -> AssociationResult:
    """
    Assign observations to tracks one-to-one within a distance gate

    Args:
        predicted: (N, 3) predicted track positions, in stable track order
        observed: (M, 3) observation positions
        gate: Maximum association distance (inclusive)
        algorithm: 'greedy_nearest_neighbor' or 'optimal_assignment'

    Returns:
        AssociationResult with disjoint matches and the unmatched indices

    Example:
        >>> result = associate(np.array([[0, 0, 0]]), np.array([[0.1, 0, 0], [3, 0, 0]]), gate=0.5)
        >>> result.matches
        ((0, 0),)
        >>> result.unmatched_observations
        (1,)
    """
    predicted = np.asarray(predicted, dtype=np.float64).reshape(-1, 3)
    observed = np.asarray(observed, dtype=np.float64).reshape(-1, 3)
    n_tracks, n_obs = len(predicted), len(observed)

    if n_tracks == 0 or n_obs == 0:
        return AssociationResult(
            matches=(),
            unmatched_tracks=tuple(range(n_tracks)),
            unmatched_observations=tuple(range(n_obs)),
        )

    distances = distance_matrix(predicted, observed)

    if AssociationAlgorithm(algorithm) is AssociationAlgorithm.OPTIMAL_ASSIGNMENT:
        pairs = optimal_assignment(distances, gate)
    else:
        pairs = greedy_assignment(distances, gate)

    matched_tracks = {t for t, _ in pairs}
    matched_obs = {o for _, o in pairs}

    return AssociationResult(
        matches=tuple(sorted(pairs)),
        unmatched_tracks=tuple(t for t in range(n_tracks) if t not in matched_tracks),
        unmatched_observations=tuple(o for o in range(n_obs) if o not in matched_obs),
    )
