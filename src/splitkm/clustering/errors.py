from __future__ import annotations


class ClusteringError(ValueError):
    """
    Precondition violation inside the engine. Aborts the current run / trial only;
    the experiment driver records `tag` and moves on to the next trial.
    """

    tag = "clustering_error"


class DimensionMismatchError(ClusteringError):
    tag = "dimension_mismatch"


class EmptyPointSetError(ClusteringError):
    tag = "empty_point_set"


class TooManyClustersError(ClusteringError):
    tag = "too_many_clusters"


class ClusterTooSmallError(ClusteringError):
    tag = "cluster_too_small"


class InvalidParameterError(ClusteringError):
    tag = "invalid_parameter"


class DegenerateDataError(ClusteringError):
    tag = "degenerate_data"
