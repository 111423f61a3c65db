"""Collection pipeline for the PIZZINT tracker.

Provides the CollectionPipeline class that executes one ingestion tick:
fetch -> aggregate -> classify -> dedup -> spike detection -> persist.

Usage::

    from pizzint.pipeline import collect_once
    result = asyncio.run(collect_once())
"""

from pizzint.pipeline.collection_pipeline import CollectionPipeline, CollectionResult
from pizzint.pipeline.runner import build_connector, collect_once, run_forever

__all__ = [
    "CollectionPipeline",
    "CollectionResult",
    "build_connector",
    "collect_once",
    "run_forever",
]
