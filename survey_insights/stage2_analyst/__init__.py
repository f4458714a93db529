"""
Stage 2: The Analyst - LLM-based thematic analysis of survey columns

1. Column selection: name policy + distinct-answer threshold
2. Row projection: identity fields + answer per respondent
3. Batched narrative analysis with a final aggregation call
4. Per-answer topic classification with a themed aggregation call
"""

from .batchers import chunk_rows, get_batch_stats
from .classifiers import (
    build_admission_policy, classify_columns, is_analyzable,
    select_identity_columns, should_skip_column
)
from .projector import project_rows, build_dataset
from .prompt_builder import (
    Prompt, build_batch_prompt, build_classification_prompt, build_aggregation_prompt
)
from .llm_client import LLMClient
from .exceptions import LLMError, TransportError, MalformedResponseError
from .summarizer import summarize
from .pipelines import analyze_column, classify_rows, parse_topics

__all__ = [
    # Batchers
    'chunk_rows',
    'get_batch_stats',
    # Column classifiers
    'build_admission_policy',
    'classify_columns',
    'is_analyzable',
    'select_identity_columns',
    'should_skip_column',
    # Projection
    'project_rows',
    'build_dataset',
    # Prompts
    'Prompt',
    'build_batch_prompt',
    'build_classification_prompt',
    'build_aggregation_prompt',
    # LLM client
    'LLMClient',
    'LLMError',
    'TransportError',
    'MalformedResponseError',
    # Pipelines
    'summarize',
    'analyze_column',
    'classify_rows',
    'parse_topics',
]
