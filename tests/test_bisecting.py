import numpy as np
import pytest

from splitkm.clustering.bisecting import best_bisection, pick_target, run_bisecting, tentative_bisect
from splitkm.clustering.errors import ClusterTooSmallError, DegenerateDataError, InvalidParameterError
from splitkm.clustering.geometry import cluster_sse, sse
from splitkm.clustering.metrics import centroid_index
from splitkm.clustering.tracking import ProgressTracker
from splitkm.clustering.types import CentroidSet, PointSet


def line_blobs(k=4, n_per=30, spacing=40.0, seed=0):
    rng = np.random.default_rng(seed)
    centers = np.array([[j * spacing, 0.0] for j in range(k)])
    X = np.vstack([c + rng.normal(size=(n_per, 2)) for c in centers])
    return X, centers


def test_tentative_bisect_is_local():
    X, _ = line_blobs(k=2)
    points = PointSet(X)
    points.reset_labels(0)
    res = tentative_bisect(points, 0, None, np.random.default_rng(0))
    assert res.centroids.shape == (2, 2)
    assert set(np.unique(res.labels)) <= {0, 1}
    assert np.all(points.labels == 0)


def test_best_bisection_is_no_worse_than_one_trial():
    X, _ = line_blobs(k=3)
    points = PointSet(X)
    points.reset_labels(0)
    one = tentative_bisect(points, 0, None, np.random.default_rng(5))
    best = best_bisection(points, 0, 8, None, np.random.default_rng(5))
    assert best.sse <= one.sse + 1e-9


def test_bisecting_reaches_k():
    X, centers = line_blobs(k=4)
    points = PointSet(X)
    points.reset_labels(0)
    C = CentroidSet(X.mean(axis=0, keepdims=True))
    tracker = ProgressTracker(ground_truth=centers, record_time=False)

    result = run_bisecting(points, C, 4, None, np.random.default_rng(2), trials=5, tracker=tracker)
    assert len(C) == 4
    assert result == pytest.approx(sse(points, C))
    assert centroid_index(C, centers) <= 1
    assert [s.n_centroids for s in tracker.samples] == [1, 2, 3, 4, 4]
    # every cluster carries its members' SSE
    assert sum(cluster_sse(points, C, c) for c in range(4)) == pytest.approx(result)


def test_bisecting_preconditions():
    X, _ = line_blobs(k=2)
    points = PointSet(X)
    points.reset_labels(0)
    C = CentroidSet(X.mean(axis=0, keepdims=True))
    with pytest.raises(InvalidParameterError):
        run_bisecting(points, C, 2, None, np.random.default_rng(0), trials=0)

    lone = PointSet(np.array([[0.0, 0.0]]), labels=[0])
    with pytest.raises(ClusterTooSmallError):
        tentative_bisect(lone, 0, None, np.random.default_rng(0))


def test_pick_target_skips_clusters_that_shrank():
    # cluster 0 lost all but one point since its SSE was last computed
    X = np.array([[0.0, 0.0], [10.0, 0.0], [11.0, 0.0], [13.0, 0.0]])
    points = PointSet(X, labels=[0, 1, 1, 1])
    C = CentroidSet(np.array([[0.0, 0.0], [11.0, 0.0]]))
    sse_list = [500.0, 8.0]

    assert pick_target(points, C, sse_list) == 1
    assert sse_list == [0.0, 8.0]


def test_pick_target_needs_a_splittable_cluster():
    points = PointSet(np.array([[0.0, 0.0], [5.0, 5.0]]), labels=[0, 1])
    C = CentroidSet(np.array([[0.0, 0.0], [5.0, 5.0]]))
    with pytest.raises(DegenerateDataError):
        pick_target(points, C, [3.0, 4.0])
