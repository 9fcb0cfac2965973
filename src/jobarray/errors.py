from __future__ import annotations


class JobArrayError(Exception):
    """Base class for every failure that aborts a synthesis."""


class InputError(JobArrayError):
    """Source missing, unreadable, or empty after filtering."""


class SchemaError(JobArrayError):
    """Malformed header, inconsistent row width or unsplittable line."""


class TargetResolutionError(JobArrayError):
    """Target executable could not be located."""


class SubmissionError(JobArrayError):
    """The scheduler could not be started."""


class SchedulerNotFound(SubmissionError, TargetResolutionError):
    """The scheduler command is not on the lookup path."""


class ConfigError(JobArrayError):
    """Bad configuration file, preset or tool option."""
