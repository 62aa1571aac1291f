"""Request pipelines that tie the services together."""

from yucabot.pipeline.orchestrator import IngestPipeline, QueryPipeline, build_context

__all__ = ["IngestPipeline", "QueryPipeline", "build_context"]
