"""Tests for scheduler payload models."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from scheduler_client.models import (
    AggregateStatsResponse,
    Job,
    JobStat,
    ListJobStatsResponse,
    parse_timestamp,
)


class TestParseTimestamp:
    def test_zero_time_means_never(self):
        assert parse_timestamp("0001-01-01T00:00:00Z") is None

    def test_nanoseconds_truncated_to_microseconds(self):
        assert (
            parse_timestamp("2015-06-04T19:25:16.828696123-07:00")
            == "2015-06-04T19:25:16.828696-07:00"
        )

    def test_empty_values(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None


class TestJob:
    def test_unknown_fields_ignored(self):
        job = Job.model_validate({"id": "a", "lock": {}, "Stats": []})

        assert job.id == "a"

    def test_job_is_immutable(self):
        job = Job(id="a")

        with pytest.raises(ValidationError):
            job.name = "renamed"

    def test_null_dependency_lists(self):
        job = Job.model_validate({"dependent_jobs": None, "parent_jobs": None})

        assert job.dependent_jobs == ()
        assert job.parent_jobs == ()


class TestJobStat:
    def test_accepts_snake_case_keys(self):
        stat = JobStat.model_validate(
            {"job_id": "a", "success": True, "execution_duration": 2_000_000}
        )

        assert stat.job_id == "a"
        assert stat.execution_time == timedelta(milliseconds=2)

    def test_job_id_required(self):
        with pytest.raises(ValidationError):
            JobStat.model_validate({"Success": True})

    def test_null_stats_list(self):
        assert ListJobStatsResponse.model_validate({"job_stats": None}).job_stats == []


class TestAggregateStatsResponse:
    def test_missing_stats_rejected(self):
        with pytest.raises(ValidationError):
            AggregateStatsResponse.model_validate({})
