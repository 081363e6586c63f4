"""Vector math for exhaustive nearest-neighbour scoring."""

from collections.abc import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 if either has zero magnitude."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def cosine_scores(query: Sequence[float], vectors: Sequence[Sequence[float]]) -> list[float]:
    """Score ``query`` against every row of ``vectors`` in one pass.

    Rows with zero magnitude score 0.0 instead of dividing by zero.
    """
    if not vectors:
        return []
    q = np.asarray(query, dtype=np.float64)
    matrix = np.asarray(vectors, dtype=np.float64)
    q_norm = float(np.linalg.norm(q))
    if q_norm == 0.0:
        return [0.0] * len(vectors)

    row_norms = np.linalg.norm(matrix, axis=1)
    dots = matrix @ q
    scores = np.zeros(len(vectors), dtype=np.float64)
    nonzero = row_norms > 0.0
    scores[nonzero] = dots[nonzero] / (row_norms[nonzero] * q_norm)
    return scores.tolist()
