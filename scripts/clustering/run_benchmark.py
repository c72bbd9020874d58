from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from splitkm.experiment.config import DatasetSpec, ExperimentConfig, load_config
from splitkm.experiment.runner import run_experiment

app = typer.Typer(add_completion=False)


@app.command()
def main(
    config: Optional[Path] = typer.Option(None, help="YAML experiment config; overrides the quick flags"),
    data: Optional[Path] = typer.Option(None, help="point file (quick mode)"),
    gt: Optional[Path] = typer.Option(None, help="ground-truth centroid file (quick mode)"),
    k: int = 15,
    algorithms: str = "kmeans,random_split,sse_split_intra,bisecting",
    loops: int = 10,
    max_swaps: int = 100,
    track_progress: bool = False,
    track_time: bool = False,
    track_states: bool = False,
    verbosity: str = "debug",
    seed: Optional[int] = None,
    out: str = "outputs",
):
    if config is not None:
        cfg = load_config(config)
    elif data is not None:
        cfg = ExperimentConfig(
            datasets=[DatasetSpec(name=data.stem, data=str(data), ground_truth=str(gt) if gt else None, k=k)],
            algorithms=[a.strip() for a in algorithms.split(",") if a.strip()],
            loop_count=loops,
            max_swaps=max_swaps,
            track_progress=track_progress,
            track_time=track_time,
            track_states=track_states,
            verbosity=verbosity,
            random_state=seed,
            output_root=out,
        )
    else:
        raise typer.BadParameter("pass --config or --data")

    run_dir = run_experiment(cfg, config_path=config)
    typer.echo(f"Results: {run_dir}")


if __name__ == "__main__":
    app()
