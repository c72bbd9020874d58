import numpy as np
import pytest

from splitkm.clustering.geometry import cluster_sse, sse
from splitkm.clustering.greedy import SplitScores, SplitVariant, run_sse_split, tentative_sse_drop
from splitkm.clustering.metrics import centroid_index
from splitkm.clustering.tracking import ProgressTracker
from splitkm.clustering.types import CentroidSet, PointSet


def line_blobs(k=3, n_per=40, spacing=40.0, seed=0):
    rng = np.random.default_rng(seed)
    centers = np.array([[j * spacing, 0.0] for j in range(k)])
    X = np.vstack([c + rng.normal(size=(n_per, 2)) for c in centers])
    return X, centers


def single_cluster(X):
    points = PointSet(X)
    points.reset_labels(0)
    return points, CentroidSet(X.mean(axis=0, keepdims=True))


def test_tentative_drop_leaves_state_alone():
    X, _ = line_blobs(k=2)
    points, C = single_cluster(X)
    labels_before = points.labels.copy()
    C_before = C.to_array()
    base = cluster_sse(points, C, 0)
    drop = tentative_sse_drop(points, 0, base, None, np.random.default_rng(0))
    assert 0.0 < drop <= base
    assert np.array_equal(points.labels, labels_before)
    assert np.array_equal(C.to_array(), C_before)


def test_tentative_drop_of_singleton_is_zero():
    points = PointSet(np.array([[0.0, 0.0], [5.0, 5.0]]), labels=[0, 1])
    assert tentative_sse_drop(points, 1, 0.0, None, np.random.default_rng(0)) == 0.0


def test_split_scores_pick_the_two_blob_cluster():
    X, _ = line_blobs(k=3)
    points = PointSet(X)
    points.labels[:40] = 0
    points.labels[40:] = 1
    C = CentroidSet(np.array([X[:40].mean(axis=0), X[40:].mean(axis=0)]))
    scores = SplitScores()
    scores.refresh(points, C, range(2), None, np.random.default_rng(0))
    assert len(scores.sse_drop) == 2
    assert scores.best() == 1
    scores.resize(4)
    assert scores.sse_drop[2:] == [0.0, 0.0]


@pytest.mark.parametrize("variant", list(SplitVariant))
def test_sse_split_finds_separated_blobs(variant):
    X, centers = line_blobs(k=3)
    points, C = single_cluster(X)
    tracker = ProgressTracker(ground_truth=centers, record_time=False)
    result = run_sse_split(points, C, 3, None, np.random.default_rng(1), variant=variant, tracker=tracker)

    assert len(C) == 3
    assert points.is_assigned(3)
    assert result == pytest.approx(sse(points, C))
    assert centroid_index(C, centers) == 0

    # initial state, one sample per split, final state
    assert [s.n_centroids for s in tracker.samples] == [1, 2, 3, 3]
    assert tracker.samples[1].split_target == 0
    assert tracker.samples[-1].ci == 0


def test_sse_split_accepts_string_variant_and_noop_target():
    X, _ = line_blobs(k=2)
    points, C = single_cluster(X)
    run_sse_split(points, C, 1, None, np.random.default_rng(0), variant="global")
    assert len(C) == 1
