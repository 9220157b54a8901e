"""
Surprise App - Release Reaction Analysis Client

Client-side orchestration for an economic release analytics service. Keeps the
selected indicator, market and horizon, fetches the precomputed datasets for
that combination, and turns them into tab views, narratives and CSV exports.
"""

__version__ = "0.1.0"
__author__ = "Surprise App Team"
