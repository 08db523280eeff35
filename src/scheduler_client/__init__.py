"""
Scheduler Client - Python access layer for a remote job-scheduling service.

Wraps the service's HTTP/JSON API (job CRUD, job statistics, manual starts and
aggregate statistics) behind typed client methods, with a bounded, host-aware
redirect policy guarding the transport.
"""

__version__ = "1.0.0"
__author__ = "Seba Battig"
