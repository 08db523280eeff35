"""
Jobs API Client for the scheduler service.

One method per remote capability. Each method issues a single logical request
and applies a single status check; failures are raised to the caller, never
retried.
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..config import ConfigManager, JOB_PATH, STATS_PATH
from ..models import (
    AddJobResponse,
    AggregateStats,
    AggregateStatsResponse,
    Job,
    JobResponse,
    JobStat,
    ListJobStatsResponse,
    ListJobsResponse,
)
from .base_client import (
    DeleteFailedError,
    GenericRequestError,
    JobCreationError,
    JobNotFoundError,
    SchedulerAPIClient,
)

logger = logging.getLogger(__name__)


class SchedulerClient(SchedulerAPIClient):
    """Client for job management operations with the scheduler service.

    Example:
        >>> with SchedulerClient("http://127.0.0.1:8000") as client:
        ...     job_id = client.create_job({
        ...         "name": "test_job",
        ...         "schedule": "R2/2015-06-04T19:25:16.828696-07:00/PT10S",
        ...         "command": "bash -c 'date'",
        ...     })
        ...     job = client.get_job(job_id)
    """

    def create_job(self, fields: Mapping[str, str]) -> str:
        """Create a job from an arbitrary field mapping.

        Field names and values are sent as-is; the service validates them.

        Args:
            fields: Job fields, e.g. name, schedule, command, owner

        Returns:
            Identifier of the created job

        Raises:
            JobCreationError: If the service does not answer 201 Created
            TransportError: If the request fails below the HTTP layer
        """
        response = self._request("POST", JOB_PATH, json=dict(fields))
        if response.status_code != 201:
            raise JobCreationError(response.status_code)
        return self._decode(response, AddJobResponse).id

    def get_job(self, job_id: str) -> Job:
        """Retrieve a job by its ID.

        Raises:
            JobNotFoundError: If the service does not answer 200 OK
        """
        response = self._request("GET", JOB_PATH + job_id)
        if response.status_code != 200:
            raise JobNotFoundError(response.status_code)
        return self._decode(response, JobResponse).job

    def list_jobs(self) -> Dict[str, Job]:
        """Return every job known to the service, keyed by ID.

        Raises:
            GenericRequestError: If the service does not answer 200 OK
        """
        response = self._request("GET", JOB_PATH)
        if response.status_code != 200:
            raise GenericRequestError(response.status_code)
        return self._decode(response, ListJobsResponse).jobs

    def delete_job(self, job_id: str) -> bool:
        """Delete a job by its ID.

        Returns:
            True once the service answers 204 No Content

        Raises:
            DeleteFailedError: Carrying the observed status for any other answer
        """
        response = self._request("DELETE", JOB_PATH + job_id)
        if response.status_code != 204:
            raise DeleteFailedError(response.status_code)
        return True

    def get_job_stats(self, job_id: str) -> List[JobStat]:
        """Retrieve the run history of a job.

        Raises:
            GenericRequestError: If the service does not answer 200 OK
        """
        response = self._request("GET", JOB_PATH + "stats/" + job_id)
        if response.status_code != 200:
            raise GenericRequestError(response.status_code)
        return self._decode(response, ListJobStatsResponse).job_stats

    def start_job(self, job_id: str) -> bool:
        """Manually start a job by its ID.

        Returns:
            True if the service answered 204 No Content, False otherwise.
            Unlike delete_job, a rejected start is not raised; callers must
            check the result. Transport failures are still raised.
        """
        response = self._request("POST", JOB_PATH + "start/" + job_id)
        # Known quirk: kept as a boolean until the API settles whether a
        # rejected start should raise like delete_job does.
        if response.status_code != 204:
            logger.debug(f"Start of job {job_id} returned {response.status_code}")
            return False
        return True

    def get_aggregate_stats(self) -> AggregateStats:
        """Retrieve scheduler-wide statistics.

        Raises:
            GenericRequestError: If the service does not answer 200 OK
        """
        response = self._request("GET", STATS_PATH)
        if response.status_code != 200:
            raise GenericRequestError(response.status_code)
        return self._decode(response, AggregateStatsResponse).stats


def create_client(
    endpoint: Optional[str] = None,
    config_path: Optional[Path] = None,
) -> SchedulerClient:
    """Factory function to create a SchedulerClient from stored configuration.

    Args:
        endpoint: Optional endpoint overriding the configured one
        config_path: Optional path to a JSON config file

    Returns:
        SchedulerClient: Initialized client
    """
    config = ConfigManager(config_path).load()
    return SchedulerClient(endpoint=endpoint, config=config)
