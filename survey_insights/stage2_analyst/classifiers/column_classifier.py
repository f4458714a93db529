"""
Column classifier - Determines if a survey column is worth LLM analysis

Filters out:
- Choice questions and respondent metadata (by column name, via a policy)
- Columns with too few distinct answers to contain themes

Two name policies are supported and selected by configuration:
- marker-substring: keep only names containing a free-text marker
- blacklist-pattern: drop names matching metadata/choice patterns
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ...stage1_ingest.config import NO_ANSWER_SENTINELS
from ...stage1_ingest.excel_reader import is_no_answer
from ..config import (
    DEFAULT_ADMISSION_POLICY,
    DEFAULT_BLACKLIST_PATTERNS,
    DEFAULT_COLUMN_MARKERS,
    DEFAULT_IDENTITY_COLUMN_COUNT,
    POLICY_BLACKLIST_PATTERN,
    POLICY_MARKER_SUBSTRING,
    UNIQUE_VALUE_THRESHOLD,
)

logger = logging.getLogger(__name__)


class AdmissionPolicy:
    """Name-based column admission rule"""

    name = ""

    def check(self, column_name: str) -> Tuple[bool, str]:
        """Return (admitted, reason) for a column name"""
        raise NotImplementedError


class MarkerSubstringPolicy(AdmissionPolicy):
    """Admit only columns whose name contains a marker (case-insensitive)"""

    name = POLICY_MARKER_SUBSTRING

    def __init__(self, markers: Optional[Iterable[str]] = None):
        self.markers = [m for m in (markers if markers is not None else DEFAULT_COLUMN_MARKERS) if m]

    def check(self, column_name: str) -> Tuple[bool, str]:
        name_lower = column_name.lower()
        for marker in self.markers:
            if marker.lower() in name_lower:
                return True, f"Column name contains marker '{marker}'"
        return False, f"Column name has no free-text marker ({', '.join(self.markers)})"


class BlacklistPatternPolicy(AdmissionPolicy):
    """Reject columns whose name matches any blacklist regex"""

    name = POLICY_BLACKLIST_PATTERN

    def __init__(self, patterns: Optional[Iterable[str]] = None):
        raw = patterns if patterns is not None else DEFAULT_BLACKLIST_PATTERNS
        self.patterns = [re.compile(p) for p in raw]

    def check(self, column_name: str) -> Tuple[bool, str]:
        for pattern in self.patterns:
            if pattern.search(column_name):
                return False, f"Column name matches '{pattern.pattern}' (skip pattern)"
        return True, "Column name matches no skip pattern"


def build_admission_policy(
    policy: str = DEFAULT_ADMISSION_POLICY,
    markers: Optional[Iterable[str]] = None,
    patterns: Optional[Iterable[str]] = None
) -> AdmissionPolicy:
    """
    Create the admission policy named by configuration

    Raises:
        ValueError: If the policy name is unknown
    """
    if policy == POLICY_MARKER_SUBSTRING:
        return MarkerSubstringPolicy(markers)
    if policy == POLICY_BLACKLIST_PATTERN:
        return BlacklistPatternPolicy(patterns)
    raise ValueError(
        f"Unknown column admission policy: {policy!r} "
        f"(expected '{POLICY_MARKER_SUBSTRING}' or '{POLICY_BLACKLIST_PATTERN}')"
    )


def count_distinct_answers(
    rows: Sequence[dict],
    column_name: str,
    sentinels: Iterable[str] = NO_ANSWER_SENTINELS
) -> int:
    """Count distinct trimmed values of a column, ignoring blanks and sentinels"""
    sentinels = list(sentinels)
    distinct = set()
    for row in rows:
        value = row.get(column_name)
        if is_no_answer(value, sentinels):
            continue
        distinct.add(str(value).strip())
    return len(distinct)


def should_skip_column(
    column_name: str,
    rows: Sequence[dict],
    policy: Optional[AdmissionPolicy] = None,
    threshold: int = UNIQUE_VALUE_THRESHOLD,
    sentinels: Iterable[str] = NO_ANSWER_SENTINELS
) -> Tuple[bool, str, int]:
    """
    Determine if a column should be skipped

    Args:
        column_name: Column header
        rows: All parsed rows of the sheet
        policy: Name admission policy (default: marker-substring)
        threshold: Minimum distinct answers required
        sentinels: "No answer" markers treated as empty

    Returns:
        Tuple of (should_skip, reason, distinct_count); distinct_count is 0
        when the name check already rejected the column
    """
    policy = policy or build_admission_policy()

    # Name check first (fast)
    admitted, name_reason = policy.check(column_name)
    if not admitted:
        return True, name_reason, 0

    distinct_count = count_distinct_answers(rows, column_name, sentinels)
    if distinct_count < threshold:
        return True, f"Only {distinct_count} distinct answers (need {threshold})", distinct_count

    return False, f"{name_reason}; {distinct_count} distinct answers", distinct_count


def is_analyzable(
    column_name: str,
    rows: Sequence[dict],
    policy: Optional[AdmissionPolicy] = None,
    threshold: int = UNIQUE_VALUE_THRESHOLD,
    sentinels: Iterable[str] = NO_ANSWER_SENTINELS
) -> bool:
    """True if the column passes the name policy and the cardinality check"""
    skip, _, _ = should_skip_column(column_name, rows, policy, threshold, sentinels)
    return not skip


def select_identity_columns(
    columns: Sequence[str],
    identity_columns: Optional[Sequence[str]] = None,
    count: int = DEFAULT_IDENTITY_COLUMN_COUNT
) -> List[str]:
    """
    Pick the respondent identity columns

    Explicit names win (kept in sheet order, unknown names ignored);
    otherwise the first `count` columns are used.
    """
    if identity_columns:
        wanted = set(identity_columns)
        missing = [c for c in identity_columns if c not in columns]
        if missing:
            logger.warning(f"Identity columns not found in sheet: {missing}")
        return [c for c in columns if c in wanted]

    return list(columns[:max(count, 0)])


def classify_columns(
    columns: Sequence[str],
    rows: Sequence[dict],
    identity_columns: Sequence[str] = (),
    policy: Optional[AdmissionPolicy] = None,
    threshold: int = UNIQUE_VALUE_THRESHOLD,
    sentinels: Iterable[str] = NO_ANSWER_SENTINELS
) -> Dict[str, Dict]:
    """
    Classify every candidate column and return classification results

    Identity columns are never candidates.

    Args:
        columns: All column names in sheet order
        rows: All parsed rows
        identity_columns: Columns holding respondent identity

    Returns:
        Dictionary of {column_name: {skip, reason, distinct_values}} in sheet order
    """
    policy = policy or build_admission_policy()
    sentinels = list(sentinels)
    results = {}

    for column_name in columns:
        if column_name in identity_columns:
            continue

        should_skip, reason, distinct_count = should_skip_column(
            column_name, rows, policy, threshold, sentinels
        )

        results[column_name] = {
            'skip': should_skip,
            'reason': reason,
            'distinct_values': distinct_count
        }

        if should_skip:
            logger.info(f"⏭️  SKIP: {column_name} - {reason}")
        else:
            logger.info(f"✅ ANALYZE: {column_name} - {reason}")

    return results
