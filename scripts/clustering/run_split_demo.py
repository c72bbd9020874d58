import numpy as np
import typer

from splitkm.clustering.engine import Algorithm, ClusteringEngine, EngineConfig
from splitkm.clustering.types import PointSet
from splitkm.datasets.toy import make_grid_blobs

app = typer.Typer(add_completion=False)


@app.command()
def main(k_side: int = 3, n_per: int = 60, spread: float = 1.0, seed: int = 0, verbosity: str = "quiet"):
    X, _, centers = make_grid_blobs(k_side=k_side, n_per=n_per, spread=spread, seed=seed)
    k = len(centers)
    engine = ClusteringEngine(EngineConfig(n_clusters=k, verbosity=verbosity), rng=np.random.default_rng(seed))
    points = PointSet(X)
    for algo in Algorithm:
        res = engine.run(points, algo, ground_truth=centers)
        typer.echo(f"{algo.display_name:>16}: sse={res.sse:10.1f}  ci={res.ci}  time={res.elapsed_ms:7.1f}ms")


if __name__ == "__main__":
    app()
