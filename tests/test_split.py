import numpy as np
import pytest

from splitkm.clustering.errors import ClusterTooSmallError, InvalidParameterError, TooManyClustersError
from splitkm.clustering.geometry import sse
from splitkm.clustering.split import (
    local_repartition,
    run_random_split,
    split_global,
    split_intra_cluster,
    split_local_repartition,
)
from splitkm.clustering.tracking import ProgressTracker
from splitkm.clustering.types import CentroidSet, PointSet, SlotKind


def two_blobs(seed=0, n_per=40):
    rng = np.random.default_rng(seed)
    X = np.vstack([rng.normal(size=(n_per, 2)), rng.normal(size=(n_per, 2)) + [50.0, 0.0]])
    return X


def single_cluster(X):
    points = PointSet(X)
    points.reset_labels(0)
    C = CentroidSet(X.mean(axis=0, keepdims=True))
    return points, C


@pytest.mark.parametrize("splitter", [split_intra_cluster, split_global, split_local_repartition])
def test_split_grows_by_one(splitter):
    X = two_blobs()
    points, C = single_cluster(X)
    res = splitter(points, C, 0, None, np.random.default_rng(1))
    assert len(C) == 2
    assert res.retained.kind == SlotKind.RETAINED and res.retained.index == 0
    assert res.appended.kind == SlotKind.APPENDED and res.appended.index == 1
    assert set(np.unique(points.labels)) == {0, 1}
    # the two blobs end up separated
    assert len(set(points.labels[:40])) == 1 and len(set(points.labels[40:])) == 1


def test_intra_split_only_touches_target_members():
    X = np.vstack([two_blobs(seed=2), [[500.0, 500.0], [501.0, 500.0]]])
    points = PointSet(X)
    points.labels[:80] = 0
    points.labels[80:] = 1
    C = CentroidSet(np.array([X[:80].mean(axis=0), [500.5, 500.0]]))
    before_other = C.to_array()[1].copy()

    res = split_intra_cluster(points, C, 0, None, np.random.default_rng(0))
    assert res.affected == frozenset({0, 2})
    assert np.array_equal(points.labels[80:], [1, 1])
    assert set(points.labels[:80]) <= {0, 2}
    assert np.array_equal(C[1], before_other)


def test_split_of_tiny_cluster_raises():
    points = PointSet(np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]]), labels=[0, 0, 1])
    C = CentroidSet(np.array([[0.5, 0.5], [2.0, 2.0]]))
    with pytest.raises(ClusterTooSmallError):
        split_intra_cluster(points, C, 1, None, np.random.default_rng(0))


def test_local_repartition_moves_strictly_closer_points():
    X = np.array([[0.0, 0.0], [4.0, 0.0], [6.0, 0.0], [10.0, 0.0]])
    points = PointSet(X, labels=[0, 0, 1, 1])
    # cluster 2 was just appended next to x=4 and x=6
    C = CentroidSet(np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 0.0]]))
    lost = local_repartition(points, C, retained=1, appended=2)
    assert lost == {0}
    assert np.array_equal(points.labels, [0, 2, 1, 1])


def test_random_split_reaches_k():
    X = two_blobs(seed=3)
    points, C = single_cluster(X)
    tracker = ProgressTracker(record_time=False)

    result = run_random_split(points, C, 4, None, np.random.default_rng(0), tracker=tracker)
    assert len(C) == 4
    assert result == pytest.approx(sse(points, C))
    steps = [(s.iteration, s.n_centroids, s.split_target) for s in tracker.samples]
    assert steps[0] == (0, 1, None)
    assert [s[1] for s in steps[1:4]] == [2, 3, 4]
    assert steps[-1] == (4, 4, None)


def test_random_split_resamples_small_clusters():
    # cluster 1 is a singleton; every draw of it must be retried
    X = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [100.0, 0.0]])
    points = PointSet(X, labels=[0, 0, 0, 1])
    C = CentroidSet(np.array([[1.0, 0.0], [100.0, 0.0]]))
    run_random_split(points, C, 3, None, np.random.default_rng(0))
    assert len(C) == 3
    assert points.is_assigned(3)


def test_random_split_preconditions():
    points, C = single_cluster(np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]]))
    with pytest.raises(TooManyClustersError):
        run_random_split(points, C, 4, None, np.random.default_rng(0))
    points = PointSet(np.zeros((3, 2)), labels=[0, 1, 1])
    C = CentroidSet(np.zeros((2, 2)))
    with pytest.raises(InvalidParameterError):
        run_random_split(points, C, 1, None, np.random.default_rng(0))


def three_clusters():
    # cluster 0 holds two groups; cluster 1 owns a stray point at x=23 near the right group
    X = np.array(
        [
            [0.0, 0.0], [1.0, 0.0], [0.0, 1.0],
            [20.0, 0.0], [21.0, 0.0], [20.0, 1.0],
            [23.0, 0.0], [40.0, 0.0], [41.0, 0.0],
            [500.0, 500.0], [501.0, 500.0],
        ]
    )
    points = PointSet(X, labels=[0, 0, 0, 0, 0, 0, 1, 1, 1, 2, 2])
    C = CentroidSet(np.array([X[:6].mean(axis=0), [40.0, 0.0], [500.5, 500.0]]))
    return points, C


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_local_repartition_split_with_other_clusters(seed):
    points, C = three_clusters()
    res = split_local_repartition(points, C, 0, None, np.random.default_rng(seed))
    pair = {res.retained.index, res.appended.index}

    assert len(C) == 4
    assert set(points.labels[:6]) <= pair
    assert points.labels[:3].tolist().count(points.labels[0]) == 3
    # the stray point left cluster 1 for the pair
    assert points.labels[6] in pair
    assert 1 in res.affected
    assert np.array_equal(points.labels[7:9], [1, 1])
    assert np.array_equal(points.labels[9:], [2, 2])
    assert 2 not in res.affected
    assert res.affected == frozenset(pair | {1})
