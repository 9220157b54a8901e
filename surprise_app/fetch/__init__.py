"""
Dataset fetchers.

One fetcher per dataset kind, each keyed on the subset of the selection its
endpoint depends on:

    stats        indicator
    scatter      indicator, market, horizon
    conditional  indicator, horizon
    path         indicator, market
    histogram    indicator
"""
from .fetcher import DATASET_SPECS, DatasetFetcher, DatasetKind, DatasetSpec, create_fetchers

__all__ = ["DATASET_SPECS", "DatasetFetcher", "DatasetKind", "DatasetSpec", "create_fetchers"]
