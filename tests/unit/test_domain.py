"""Tests for domain helpers, enums and models."""

from datetime import UTC, date, datetime
from decimal import Decimal

from priceoracle.domain.enums import JobStatus, Network, PriceSource
from priceoracle.domain.models import BackfillJob, JobStatusView, PriceRecord, PriceResult, day_of, day_start, normalize_token


class TestDayHelpers:
    def test_day_of_start_of_day(self):
        assert day_of(1704067200) == date(2024, 1, 1)

    def test_day_of_last_second(self):
        assert day_of(1704153599) == date(2024, 1, 1)

    def test_day_start(self):
        assert day_start(date(2024, 1, 2)) == 1704153600

    def test_normalize_token(self):
        assert normalize_token("  0xABCdef ") == "0xabcdef"

    def test_record_for_day_sets_timestamp(self):
        record = PriceRecord.for_day("0xabc", "ethereum", date(2024, 1, 3), Decimal("1.5"))
        assert record.timestamp == 1704240000
        assert record.source == PriceSource.LIVE


class TestEnums:
    def test_network_is_str(self):
        assert isinstance(Network.ETHEREUM, str)
        assert Network.POLYGON == "polygon"

    def test_forward_transitions_allowed(self):
        assert JobStatus.PENDING.can_move_to(JobStatus.PROCESSING)
        assert JobStatus.PROCESSING.can_move_to(JobStatus.PROCESSING)
        assert JobStatus.PROCESSING.can_move_to(JobStatus.COMPLETED)
        assert JobStatus.PROCESSING.can_move_to(JobStatus.FAILED)
        assert JobStatus.PENDING.can_move_to(JobStatus.FAILED)

    def test_backward_transitions_rejected(self):
        assert not JobStatus.PROCESSING.can_move_to(JobStatus.PENDING)

    def test_terminal_states_are_final(self):
        for terminal in (JobStatus.COMPLETED, JobStatus.FAILED):
            assert terminal.is_terminal
            for target in JobStatus:
                assert not terminal.can_move_to(target)


def _job(total: int, processed: int) -> BackfillJob:
    return BackfillJob(
        job_id="job-1",
        token="0xabc",
        network="ethereum",
        creation_date=datetime(2024, 1, 1, tzinfo=UTC),
        status=JobStatus.PROCESSING,
        total_days=total,
        processed_days=processed,
    )


class TestJobStatusView:
    def test_progress_zero_when_no_days(self):
        assert JobStatusView.from_job(_job(0, 0)).progress == 0

    def test_progress_rounds(self):
        assert JobStatusView.from_job(_job(3, 1)).progress == 33
        assert JobStatusView.from_job(_job(3, 2)).progress == 67

    def test_progress_rounds_half_up(self):
        assert JobStatusView.from_job(_job(8, 1)).progress == 13

    def test_progress_complete(self):
        view = JobStatusView.from_job(_job(25, 25))
        assert view.progress == 100
        assert view.total_days == 25
        assert view.job_id == "job-1"


class TestPriceResultPayload:
    def test_cached_payload_is_flagged_cached(self):
        before = PriceRecord.for_day("0xabc", "ethereum", date(2024, 1, 1), Decimal("10"))
        result = PriceResult(
            price=Decimal("12.5"), source=PriceSource.INTERPOLATED, timestamp=1704100000, before=before
        )

        payload = result.to_cache_payload()
        assert "cached" not in payload

        restored = PriceResult.from_cache_payload(payload)
        assert restored.cached is True
        assert restored.price == Decimal("12.5")
        assert restored.before == before
        assert restored.after is None
