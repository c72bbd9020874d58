import numpy as np
import pytest

from splitkm.clustering.engine import Algorithm, ClusteringEngine, EngineConfig
from splitkm.clustering.errors import DimensionMismatchError, TooManyClustersError
from splitkm.clustering.types import PointSet
from splitkm.datasets.toy import make_grid_blobs


def two_blobs(seed=0):
    rng = np.random.default_rng(seed)
    centers = np.array([[0.0, 0.0], [50.0, 50.0]])
    X = np.vstack([c + rng.normal(size=(40, 2)) for c in centers])
    return X, centers


@pytest.mark.parametrize("algo", list(Algorithm))
def test_every_algorithm_returns_a_full_clustering(algo):
    X, _, centers = make_grid_blobs(k_side=2, n_per=25, spacing=30.0, spread=0.5, seed=1)
    cfg = EngineConfig(n_clusters=4, n_repeats=3, max_swaps=30, track_progress=True, track_time=True)
    engine = ClusteringEngine(cfg, rng=np.random.default_rng(0))
    points = PointSet(X)

    res = engine.run(points, algo, ground_truth=centers)
    assert res.algorithm == algo
    assert res.centroids.shape == (4, 2)
    assert res.labels.shape == (100,)
    assert res.labels.min() >= 0 and res.labels.max() < 4
    assert np.isfinite(res.sse) and res.sse >= 0.0
    assert res.ci is not None and 0 <= res.ci <= 3
    assert res.elapsed_ms >= 0.0
    assert len(res.samples) >= 1
    assert len(res.times_ms) == len(res.samples)
    assert res.samples[-1].n_centroids == 4


@pytest.mark.parametrize(
    "algo",
    [
        Algorithm.SSE_SPLIT_INTRA,
        Algorithm.SSE_SPLIT_GLOBAL,
        Algorithm.SSE_SPLIT_LOCAL,
        Algorithm.BISECTING,
        Algorithm.RANDOM_SPLIT,
        Algorithm.RANDOM_SWAP,
    ],
)
def test_two_separated_blobs_are_found(algo):
    X, centers = two_blobs()
    engine = ClusteringEngine(EngineConfig(n_clusters=2, max_swaps=20), rng=np.random.default_rng(3))
    res = engine.run(PointSet(X), algo, ground_truth=centers)
    assert res.ci == 0
    assert res.success


def test_growing_algorithms_start_from_one_centroid():
    X, centers = two_blobs()
    engine = ClusteringEngine(EngineConfig(n_clusters=2, track_progress=True), rng=np.random.default_rng(0))
    for algo in Algorithm:
        res = engine.run(PointSet(X), algo, ground_truth=centers)
        if algo.grows:
            assert res.samples[0].n_centroids == 1
            assert res.samples[0].iteration == 0


def test_engine_without_ground_truth_and_string_selector():
    X, _ = two_blobs()
    engine = ClusteringEngine(EngineConfig(n_clusters=2), rng=np.random.default_rng(0))
    res = engine.run(PointSet(X), "kmeans++")
    assert res.algorithm is Algorithm.KMEANS_PP
    assert res.ci is None
    assert not res.success
    # nothing is tracked unless asked for
    assert res.samples == [] and res.times_ms == []


def test_engine_errors():
    X, centers = two_blobs()
    engine = ClusteringEngine(EngineConfig(n_clusters=200), rng=np.random.default_rng(0))
    with pytest.raises(TooManyClustersError):
        engine.run(PointSet(X), Algorithm.SSE_SPLIT_INTRA)
    with pytest.raises(DimensionMismatchError):
        engine.run(PointSet(X), Algorithm.KMEANS, ground_truth=np.zeros((2, 3)))
    with pytest.raises(ValueError):
        engine.run(PointSet(X), "no_such_algorithm")


def test_display_names_are_unique():
    names = [a.display_name for a in Algorithm]
    assert len(set(names)) == len(names)
    assert Algorithm("sse_split_local").display_name == "LocalRepartition"
