"""
Classifiers for filtering survey columns before LLM processing
"""

from .column_classifier import (
    AdmissionPolicy,
    MarkerSubstringPolicy,
    BlacklistPatternPolicy,
    build_admission_policy,
    classify_columns,
    count_distinct_answers,
    is_analyzable,
    select_identity_columns,
    should_skip_column,
)

__all__ = [
    'AdmissionPolicy',
    'MarkerSubstringPolicy',
    'BlacklistPatternPolicy',
    'build_admission_policy',
    'classify_columns',
    'count_distinct_answers',
    'is_analyzable',
    'select_identity_columns',
    'should_skip_column',
]
