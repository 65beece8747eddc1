"""
Leech Selection Constants

Defaults of the leech thresholds. Both are overridable through
LeechSettings.
"""


class LeechDefaults:
    """Default leech thresholds."""

    MIN_INCORRECT_COUNT = 3
    MAX_SRS_STAGE = 5


class SubjectTypes:
    """Subject type names used in review statistics."""

    KANJI = "kanji"
    RADICAL = "radical"
    VOCABULARY = "vocabulary"
