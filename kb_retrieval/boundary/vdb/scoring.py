"""
In-process cosine ranking.

Used by backends without a vector operator (in-memory, SQLite).
Scores are ``1 - cosine distance``, i.e. cosine similarity; a zero
vector scores 0.

Dependencies: numpy
System role: Similarity scoring for non-pgvector backends
"""

from typing import Sequence

import numpy as np


def cosine_scores(query_vector: Sequence[float], vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Cosine similarity of ``query_vector`` against each row of ``vectors``.

    Args:
        query_vector: Query vector of dimension d
        vectors: n vectors of dimension d

    Returns:
        np.ndarray: n scores in [-1, 1]
    """
    if len(vectors) == 0:
        return np.zeros(0)
    matrix = np.asarray(vectors, dtype=float)
    query = np.asarray(query_vector, dtype=float)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.zeros(len(matrix))
    nonzero = norms > 0
    scores[nonzero] = dots[nonzero] / norms[nonzero]
    return scores


def rank(
    ids: Sequence[str],
    vectors: Sequence[Sequence[float]],
    query_vector: Sequence[float],
    top_k: int,
    min_score: float | None = None,
) -> list[tuple[int, float]]:
    """
    Positions and scores of the ``top_k`` best candidates.

    Ordered by descending score; ties broken by ascending id.

    Returns:
        list of (position in ``ids``, score)
    """
    scores = cosine_scores(query_vector, vectors)
    order = sorted(range(len(ids)), key=lambda i: (-scores[i], ids[i]))
    ranked = [(i, float(scores[i])) for i in order]
    if min_score is not None:
        ranked = [(i, s) for i, s in ranked if s >= min_score]
    return ranked[:top_k]
