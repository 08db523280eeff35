"""Value objects for scheduler API payloads.

The scheduler owns these schemas; the client only decodes them. All models are
frozen and ignore fields they do not know about.
"""

import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# The scheduler reports "never" as the zero timestamp
_ZERO_TIME_PREFIX = "0001-01-01T00:00:00"
_FRACTION_PATTERN = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: Any) -> Any:
    """Normalize scheduler timestamps before pydantic parses them.

    Maps the zero timestamp to None and truncates nanosecond fractions to the
    microseconds a datetime can hold.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        if value.startswith(_ZERO_TIME_PREFIX):
            return None
        return _FRACTION_PATTERN.sub(r"\1", value, count=1)
    return value


class SchedulerModel(BaseModel):
    """Base for all decoded scheduler payloads."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Job(SchedulerModel):
    """A job as stored by the scheduler."""

    id: str = Field(default="", description="Job identifier")
    name: str = Field(default="", description="Job name")
    command: str = Field(default="", description="Command the scheduler runs")
    owner: str = Field(default="", description="Owner email address")
    disabled: bool = Field(default=False, description="Whether the job is disabled")
    dependent_jobs: Tuple[str, ...] = Field(
        default=(), description="Jobs run after this job runs"
    )
    parent_jobs: Tuple[str, ...] = Field(
        default=(), description="Jobs this job depends on"
    )
    schedule: str = Field(
        default="", description="ISO 8601 repeating interval, e.g. R/2014-03-08T20:00:00Z/PT2H"
    )
    retries: int = Field(default=0, description="Retries allowed per run")
    epsilon: str = Field(default="", description="ISO 8601 duration in which a retry is safe")
    success_count: int = Field(default=0, description="Number of successful runs")
    last_success: Optional[datetime] = Field(default=None)
    error_count: int = Field(default=0, description="Number of failed runs")
    last_error: Optional[datetime] = Field(default=None)
    last_attempted_run: Optional[datetime] = Field(default=None)
    next_run_at: Optional[datetime] = Field(default=None)

    @field_validator("dependent_jobs", "parent_jobs", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        """The scheduler encodes empty dependency lists as null."""
        return () if v is None else v

    @field_validator(
        "last_success", "last_error", "last_attempted_run", "next_run_at", mode="before"
    )
    @classmethod
    def normalize_timestamp(cls, v: Any) -> Any:
        return parse_timestamp(v)


class JobStat(SchedulerModel):
    """One completed run of a job."""

    job_id: str = Field(validation_alias=AliasChoices("job_id", "JobId"))
    ran_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("ran_at", "RanAt")
    )
    number_of_retries: int = Field(
        default=0, validation_alias=AliasChoices("number_of_retries", "NumberOfRetries")
    )
    success: bool = Field(
        default=False, validation_alias=AliasChoices("success", "Success")
    )
    execution_duration: int = Field(
        default=0,
        description="Execution duration in nanoseconds",
        validation_alias=AliasChoices("execution_duration", "ExecutionDuration"),
    )

    @field_validator("ran_at", mode="before")
    @classmethod
    def normalize_timestamp(cls, v: Any) -> Any:
        return parse_timestamp(v)

    @property
    def execution_time(self) -> timedelta:
        return timedelta(microseconds=self.execution_duration / 1000)


class AggregateStats(SchedulerModel):
    """Scheduler-wide counters."""

    active_jobs: int = Field(
        default=0, validation_alias=AliasChoices("active_jobs", "ActiveJobs")
    )
    disabled_jobs: int = Field(
        default=0, validation_alias=AliasChoices("disabled_jobs", "DisabledJobs")
    )
    jobs: int = Field(default=0, validation_alias=AliasChoices("jobs", "Jobs"))
    error_count: int = Field(
        default=0, validation_alias=AliasChoices("error_count", "ErrorCount")
    )
    success_count: int = Field(
        default=0, validation_alias=AliasChoices("success_count", "SuccessCount")
    )
    next_run_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("next_run_at", "NextRunAt")
    )
    last_attempted_run: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("last_attempted_run", "LastAttemptedRun"),
    )
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("created_at", "CreatedAt")
    )

    @field_validator("next_run_at", "last_attempted_run", "created_at", mode="before")
    @classmethod
    def normalize_timestamp(cls, v: Any) -> Any:
        return parse_timestamp(v)


class AddJobResponse(SchedulerModel):
    """Response envelope for job creation."""

    id: str


class JobResponse(SchedulerModel):
    """Response envelope for a single job."""

    job: Job


class ListJobsResponse(SchedulerModel):
    """Response envelope for the job listing."""

    jobs: Dict[str, Job] = Field(default_factory=dict)

    @field_validator("jobs", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class ListJobStatsResponse(SchedulerModel):
    """Response envelope for the run history of one job."""

    job_stats: List[JobStat] = Field(default_factory=list)

    @field_validator("job_stats", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class AggregateStatsResponse(SchedulerModel):
    """Response envelope for scheduler-wide statistics."""

    stats: AggregateStats = Field(validation_alias=AliasChoices("stats", "Stats"))
