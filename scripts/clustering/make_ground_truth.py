from __future__ import annotations

from pathlib import Path

import typer

from splitkm.core.io import read_partition, read_points, write_centroids
from splitkm.core.log import get_logger
from splitkm.experiment.ground_truth import ground_truth_from_partition

app = typer.Typer(add_completion=False)


@app.command()
def main(data: Path, partition: Path, out: Path, zero_based: bool = False):
    """Average every partition group of DATA into a ground-truth centroid file."""
    log = get_logger(verbosity="debug")
    X = read_points(data)
    labels = read_partition(partition)
    C = ground_truth_from_partition(X, labels, one_based=not zero_based, log=log)
    write_centroids(out, C)
    typer.echo(f"{len(C)} centroids from {len(X)} points -> {out}")


if __name__ == "__main__":
    app()
