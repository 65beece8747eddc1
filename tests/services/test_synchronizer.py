"""Tests for CollectionSynchronizer against a mocked HTTP session."""

import threading

import pytest

from wanisync.services.sync.synchronizer import SyncRequest
from wanisync.shared.errors import DomainError, ErrorCode, OperationCancelledError, WaniKaniAPIError

T0 = "2024-01-01T00:00:00.000000Z"
T1 = "2024-02-01T00:00:00.000000Z"
T2 = "2024-03-01T00:00:00.000000Z"

SUBJECTS_NEXT = "https://api.wanikani.com/v2/subjects?page_after_id=2"


def _snapshot(cache_dir):
    return {path.name: path.read_bytes() for path in sorted(cache_dir.iterdir())}


class TestCollectionSynchronizer:
    def test_first_sync_fetches_all_pages(
        self, synchronizer, store, mock_session, make_response, make_page, make_resource
    ):
        """Empty cache, two pages of two subjects: four records, two requests."""
        mock_session.get.side_effect = [
            make_response(
                body=make_page(
                    [make_resource(1, object_type="kanji"), make_resource(2, object_type="kanji")],
                    next_url=SUBJECTS_NEXT,
                    updated_at=T1,
                )
            ),
            make_response(
                body=make_page(
                    [make_resource(3, object_type="kanji"), make_resource(4, object_type="kanji")],
                    updated_at=T1,
                )
            ),
        ]

        result = synchronizer.sync("subjects")

        assert sorted(result) == [1, 2, 3, 4]
        assert mock_session.get.call_count == 2
        assert store.get("subjects-watermark") == {"date": T1, "scoped": False}
        assert sorted(store.get("subjects")) == ["1", "2", "3", "4"]

    def test_first_sync_is_unconditional(self, synchronizer, mock_session, make_response, make_page):
        mock_session.get.return_value = make_response(body=make_page([]))

        synchronizer.sync("review_statistics")

        kwargs = mock_session.get.call_args.kwargs
        assert "If-Modified-Since" not in kwargs["headers"]
        assert kwargs["params"] is None

    def test_missing_needed_id_forces_full_fetch(
        self, synchronizer, mock_session, make_response, make_page, make_resource
    ):
        """Watermark set and ids {1,2} cached, {1,2,3} needed: unwatermarked fetch."""
        mock_session.get.return_value = make_response(
            body=make_page([make_resource(1), make_resource(2)], updated_at=T0)
        )
        synchronizer.sync("subjects")

        mock_session.get.return_value = make_response(
            body=make_page([make_resource(1), make_resource(2), make_resource(3)], updated_at=T1)
        )
        result = synchronizer.sync("subjects", {1, 2, 3})

        kwargs = mock_session.get.call_args.kwargs
        assert kwargs["params"] == {"ids": "1,2,3"}
        assert "If-Modified-Since" not in kwargs["headers"]
        assert sorted(result) == [1, 2, 3]

    def test_unchanged_returns_cached_value(
        self, synchronizer, store, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(
            body=make_page([make_resource(1), make_resource(2)], updated_at=T0)
        )
        before = synchronizer.sync("review_statistics")
        cached_before = store.get("review_statistics")

        mock_session.get.return_value = make_response(status_code=304)
        after = synchronizer.sync("review_statistics")

        assert after == before
        assert store.get("review_statistics") == cached_before
        assert store.get("review_statistics-watermark") == {"date": T0, "scoped": False}
        kwargs = mock_session.get.call_args.kwargs
        assert kwargs["headers"]["If-Modified-Since"] == T0
        assert kwargs["params"] == {"updated_after": T0}

    def test_second_sync_issues_one_request_and_no_writes(
        self, synchronizer, store, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(body=make_page([make_resource(1)], updated_at=T0))
        synchronizer.sync("review_statistics")
        writes = store.write_count
        calls = mock_session.get.call_count

        mock_session.get.return_value = make_response(status_code=304)
        synchronizer.sync("review_statistics")

        assert mock_session.get.call_count == calls + 1
        assert store.write_count == writes

    def test_repeated_identical_delta_writes_nothing(
        self, synchronizer, store, mock_session, make_response, make_page, make_resource
    ):
        page = make_page([make_resource(1, updated_at=T0)], updated_at=T0)
        mock_session.get.return_value = make_response(body=page)
        synchronizer.sync("review_statistics")
        writes = store.write_count

        synchronizer.sync("review_statistics")

        assert store.write_count == writes

    def test_merge_keeps_newest_record(
        self, synchronizer, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(
            body=make_page(
                [make_resource(1, updated_at=T1, meaning_incorrect=1), make_resource(2, updated_at=T1)],
                updated_at=T1,
            )
        )
        synchronizer.sync("review_statistics")

        mock_session.get.return_value = make_response(
            body=make_page(
                [
                    make_resource(1, updated_at=T0, meaning_incorrect=0),
                    make_resource(2, updated_at=T2, meaning_incorrect=9),
                    make_resource(3, updated_at=T2),
                ],
                updated_at=T2,
            )
        )
        result = synchronizer.sync("review_statistics")

        assert sorted(result) == [1, 2, 3]
        assert result[1].data == {"meaning_incorrect": 1}
        assert result[2].data == {"meaning_incorrect": 9}

    def test_assignments_keyed_by_subject_id(
        self, synchronizer, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(
            body=make_page(
                [make_resource(900, object_type="assignment", subject_id=17, srs_stage=2)],
                updated_at=T0,
            )
        )

        result = synchronizer.sync("assignments", {17})

        assert list(result) == [17]
        assert mock_session.get.call_args.kwargs["params"] == {"subject_ids": "17"}

    def test_scoped_sync_writes_scoped_watermark(
        self, synchronizer, store, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(
            body=make_page(
                [make_resource(900, object_type="assignment", subject_id=1)],
                updated_at=T1,
            )
        )

        synchronizer.sync("assignments", {1})

        assert store.get("assignments-watermark") == {"date": T1, "scoped": True}

    def test_whole_sync_after_scoped_sync_fetches_everything(
        self, synchronizer, store, mock_session, make_response, make_page, make_resource
    ):
        """A record outside the earlier scope, older than its watermark, is still fetched."""
        mock_session.get.return_value = make_response(
            body=make_page(
                [make_resource(900, updated_at=T1, object_type="assignment", subject_id=1)],
                updated_at=T1,
            )
        )
        synchronizer.sync("assignments", {1})

        mock_session.get.return_value = make_response(
            body=make_page(
                [
                    make_resource(900, updated_at=T1, object_type="assignment", subject_id=1),
                    make_resource(905, updated_at=T0, object_type="assignment", subject_id=5),
                ],
                updated_at=T1,
            )
        )
        result = synchronizer.sync("assignments")

        kwargs = mock_session.get.call_args.kwargs
        assert kwargs["params"] is None
        assert "If-Modified-Since" not in kwargs["headers"]
        assert sorted(result) == [1, 5]
        assert store.get("assignments-watermark") == {"date": T1, "scoped": False}

    def test_scoped_sync_after_whole_sync_requests_needed_ids_only(
        self, synchronizer, store, mock_session, make_response, make_page, make_resource
    ):
        assignments = [
            make_resource(10_000 + subject_id, object_type="assignment", subject_id=subject_id)
            for subject_id in range(1, 3001)
        ]
        mock_session.get.return_value = make_response(body=make_page(assignments, updated_at=T0))
        synchronizer.sync("assignments")

        mock_session.get.return_value = make_response(status_code=304)
        result = synchronizer.sync("assignments", {1, 2})

        kwargs = mock_session.get.call_args.kwargs
        assert kwargs["params"] == {"subject_ids": "1,2", "updated_after": T0}
        assert kwargs["headers"]["If-Modified-Since"] == T0
        assert sorted(result) == [1, 2]

    def test_scoped_delta_after_whole_sync_keeps_watermark(
        self, synchronizer, store, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(
            body=make_page(
                [
                    make_resource(901, updated_at=T0, object_type="assignment", subject_id=1, srs_stage=1),
                    make_resource(902, updated_at=T0, object_type="assignment", subject_id=2, srs_stage=1),
                ],
                updated_at=T0,
            )
        )
        synchronizer.sync("assignments")

        mock_session.get.return_value = make_response(
            body=make_page(
                [make_resource(901, updated_at=T2, object_type="assignment", subject_id=1, srs_stage=4)],
                updated_at=T2,
            )
        )
        result = synchronizer.sync("assignments", {1})

        assert result[1].data["srs_stage"] == 4
        assert synchronizer.cached("assignments")[1].data["srs_stage"] == 4
        # Subject 2 may have changed after T0 as well
        assert store.get("assignments-watermark") == {"date": T0, "scoped": False}

    def test_record_without_key_rejected(
        self, synchronizer, store, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(
            body=make_page([make_resource(900, object_type="assignment", srs_stage=2)], updated_at=T0)
        )

        with pytest.raises(DomainError):
            synchronizer.sync("assignments")

        assert store.get("assignments") == {}

    def test_watermark_never_moves_backwards(
        self, synchronizer, store, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(body=make_page([make_resource(1)], updated_at=T2))
        synchronizer.sync("review_statistics")

        mock_session.get.return_value = make_response(body=make_page([make_resource(2)], updated_at=T1))
        synchronizer.sync("review_statistics")

        assert store.get("review_statistics-watermark") == {"date": T2, "scoped": False}

    def test_failure_mid_pagination_changes_nothing(
        self, synchronizer, cache_dir, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(body=make_page([make_resource(1)], updated_at=T0))
        synchronizer.sync("review_statistics")
        before = _snapshot(cache_dir)

        mock_session.get.return_value = None
        mock_session.get.side_effect = [
            make_response(
                body=make_page(
                    [make_resource(2, updated_at=T1)],
                    next_url="https://api.wanikani.com/v2/review_statistics?page_after_id=2",
                    updated_at=T1,
                )
            ),
            make_response(status_code=500),
        ]

        with pytest.raises(WaniKaniAPIError):
            synchronizer.sync("review_statistics")

        assert _snapshot(cache_dir) == before
        assert sorted(synchronizer.cached("review_statistics")) == [1]

    def test_empty_needed_ids_skips_request(self, synchronizer, mock_session):
        result = synchronizer.sync("assignments", set())

        assert len(result) == 0
        mock_session.get.assert_not_called()

    def test_result_restricted_to_needed_ids(
        self, synchronizer, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(
            body=make_page([make_resource(1), make_resource(2), make_resource(3)], updated_at=T0)
        )
        synchronizer.sync("subjects")

        mock_session.get.return_value = make_response(status_code=304)
        result = synchronizer.sync("subjects", {2})

        assert list(result) == [2]

    def test_unknown_collection(self, synchronizer):
        with pytest.raises(DomainError) as exc_info:
            synchronizer.sync("reviews")

        assert exc_info.value.code == ErrorCode.UNKNOWN_COLLECTION

    def test_cancelled_sync(self, synchronizer, mock_session):
        cancel_event = threading.Event()
        cancel_event.set()

        with pytest.raises(OperationCancelledError):
            synchronizer.sync("review_statistics", cancel_event=cancel_event)

        mock_session.get.assert_not_called()


class TestGetResource:
    def test_fetches_once_then_serves_cache(
        self, synchronizer, store, mock_session, make_response, make_resource
    ):
        mock_session.get.return_value = make_response(
            body=make_resource(440, object_type="kanji", characters="一")
        )

        first = synchronizer.get_resource("subjects", 440)
        second = synchronizer.get_resource("subjects", 440)

        assert first == second
        assert first.data["characters"] == "一"
        assert mock_session.get.call_count == 1
        assert "subject-440" in store

    def test_failed_fetch_stores_nothing(self, synchronizer, store, mock_session, make_response):
        mock_session.get.return_value = make_response(status_code=404)

        with pytest.raises(WaniKaniAPIError):
            synchronizer.get_resource("subjects", 1)

        assert "subject-1" not in store

    def test_collection_without_resource_cache(self, synchronizer):
        with pytest.raises(DomainError):
            synchronizer.get_resource("assignments", 1)


class TestSyncMany:
    def test_continues_past_failures(
        self, synchronizer, mock_session, make_response, make_page, make_resource
    ):
        mock_session.get.return_value = make_response(body=make_page([make_resource(1)], updated_at=T0))
        synchronizer.sync("review_statistics")

        mock_session.get.return_value = None
        mock_session.get.side_effect = [
            make_response(status_code=503),
            make_response(
                body=make_page(
                    [make_resource(5, object_type="assignment", subject_id=5, srs_stage=1)],
                    updated_at=T0,
                )
            ),
        ]

        report = synchronizer.sync_many(
            [SyncRequest("review_statistics"), SyncRequest("assignments")]
        )

        assert [outcome.collection for outcome in report.failed] == ["review_statistics"]
        assert [outcome.collection for outcome in report.succeeded] == ["assignments"]
        failed = report["review_statistics"]
        assert failed.error.code == ErrorCode.API_SERVER_ERROR
        # Last-known-good data is still served
        assert list(failed.records) == [1]
        assert list(report["assignments"].records) == [5]

    def test_unknown_collection_reported(self, synchronizer):
        report = synchronizer.sync_many([SyncRequest("reviews")])

        assert report["reviews"].error.code == ErrorCode.UNKNOWN_COLLECTION
        assert len(report["reviews"].records) == 0

    def test_cancellation_stops_run(self, synchronizer, mock_session):
        cancel_event = threading.Event()
        cancel_event.set()

        with pytest.raises(OperationCancelledError):
            synchronizer.sync_many(
                [SyncRequest("review_statistics"), SyncRequest("assignments")],
                cancel_event=cancel_event,
            )
