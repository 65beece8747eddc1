"""Leech selection over the synchronized collections.

A leech is a subject answered incorrectly at least ``min_incorrect_count``
times that is still at or below ``max_srs_stage``. Each LeechQuery pairs a
subject type with the incorrect-answer counter to inspect; one finder runs
every query against the same synchronizer.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum

from wanisync.config.models.leech_settings import LeechSettings
from wanisync.services.sync.collections import ASSIGNMENTS, REVIEW_STATISTICS, SUBJECTS
from wanisync.services.sync.models import MergedCollection
from wanisync.services.sync.synchronizer import CollectionSynchronizer, SyncRequest
from wanisync.services.wanikani.models import Assignment, ReviewStatistic, Subject
from wanisync.shared.constants import SubjectTypes

logger = logging.getLogger(__name__)


class IncorrectField(str, Enum):
    """Review statistic counter a query inspects."""

    MEANING = "meaning_incorrect"
    READING = "reading_incorrect"


@dataclass(frozen=True)
class LeechQuery:
    name: str
    subject_type: str
    incorrect_field: IncorrectField


DEFAULT_QUERIES: tuple[LeechQuery, ...] = (
    LeechQuery("kanji_meaning", SubjectTypes.KANJI, IncorrectField.MEANING),
    LeechQuery("kanji_reading", SubjectTypes.KANJI, IncorrectField.READING),
    LeechQuery("vocabulary_meaning", SubjectTypes.VOCABULARY, IncorrectField.MEANING),
    LeechQuery("vocabulary_reading", SubjectTypes.VOCABULARY, IncorrectField.READING),
)


@dataclass(frozen=True)
class Leech:
    """A subject selected by a leech query."""

    query: str
    subject_id: int
    subject_type: str
    characters: str | None
    meanings: list[str]
    readings: list[str]
    incorrect_count: int
    srs_stage: int
    document_url: str


@dataclass
class LeechReport:
    """Leeches per query name, plus collections served from stale cache."""

    leeches: dict[str, list[Leech]] = field(default_factory=dict)
    stale_collections: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(entries) for entries in self.leeches.values())


class LeechFinder:
    """Runs leech queries against synchronized data.

    Args:
        synchronizer: Synchronizer used for every collection read
        settings: Thresholds (default: LeechSettings())
        queries: Queries to run (default: DEFAULT_QUERIES)
    """

    def __init__(
        self,
        synchronizer: CollectionSynchronizer,
        settings: LeechSettings | None = None,
        queries: tuple[LeechQuery, ...] = DEFAULT_QUERIES,
    ) -> None:
        self.synchronizer = synchronizer
        self.settings = settings or LeechSettings()
        self.queries = queries

    def find(self, cancel_event: threading.Event | None = None) -> LeechReport:
        """Sync what the queries need and return the leeches of each.

        A collection that fails to sync is read from the cache instead and
        listed in ``stale_collections``.

        Raises:
            WaniKaniAPIError: If a subject missing from the cache cannot be fetched
            OperationCancelledError: If ``cancel_event`` fires
        """
        report = LeechReport()
        review_statistics = self._sync(report, SyncRequest(REVIEW_STATISTICS.name), cancel_event)
        statistics = [ReviewStatistic.model_validate(resource.data) for resource in review_statistics.values()]

        for query in self.queries:
            report.leeches[query.name] = self._run_query(query, statistics, report, cancel_event)
            logger.info("Query %s: %d leeches", query.name, len(report.leeches[query.name]))

        return report

    def _run_query(
        self,
        query: LeechQuery,
        statistics: list[ReviewStatistic],
        report: LeechReport,
        cancel_event: threading.Event | None,
    ) -> list[Leech]:
        incorrect_counts = {
            statistic.subject_id: getattr(statistic, query.incorrect_field.value)
            for statistic in statistics
            if statistic.subject_type == query.subject_type
            and getattr(statistic, query.incorrect_field.value) >= self.settings.min_incorrect_count
        }

        assignments = self._sync(
            report,
            SyncRequest(ASSIGNMENTS.name, frozenset(incorrect_counts)),
            cancel_event,
        )

        leeches: list[Leech] = []
        for subject_id in sorted(assignments):
            assignment = Assignment.model_validate(assignments[subject_id].data)
            if assignment.srs_stage > self.settings.max_srs_stage:
                continue

            resource = self.synchronizer.get_resource(SUBJECTS, subject_id, cancel_event=cancel_event)
            subject = Subject.model_validate(resource.data)
            leeches.append(
                Leech(
                    query=query.name,
                    subject_id=subject_id,
                    subject_type=query.subject_type,
                    characters=subject.characters,
                    meanings=[meaning.meaning for meaning in subject.meanings],
                    readings=[reading.reading for reading in subject.readings],
                    incorrect_count=incorrect_counts[subject_id],
                    srs_stage=assignment.srs_stage,
                    document_url=subject.document_url,
                )
            )
        return leeches

    def _sync(
        self,
        report: LeechReport,
        request: SyncRequest,
        cancel_event: threading.Event | None,
    ) -> MergedCollection:
        outcome = self.synchronizer.sync_many([request], cancel_event=cancel_event)[request.collection]
        if not outcome.ok and request.collection not in report.stale_collections:
            report.stale_collections.append(request.collection)
        return outcome.records
