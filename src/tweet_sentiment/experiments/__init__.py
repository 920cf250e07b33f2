# Experiment orchestration

from .pipeline import PipelineConfig, SentimentPipeline, SAMPLE_BATCH, SAMPLE_STATEMENT

__all__ = ["PipelineConfig", "SentimentPipeline", "SAMPLE_BATCH", "SAMPLE_STATEMENT"]
