"""
Error taxonomy for the generation engine.

RegistryUnavailable aborts a whole run. StoreUnavailable and
PartialBatchFailure are scoped to a single (unit, day) and are collected into
the run summary instead of propagating. An already generated (unit, day) is
not an error; it is reported as a skip outcome.

CHANGELOG:
- 2026-10-02: Initial creation

TODO:
- None
"""


class DatagenError(Exception):
    """Base class for all generation engine errors."""


class RegistryUnavailable(DatagenError):
    """The unit registry could not be reached or returned an unusable answer."""


class StoreUnavailable(DatagenError):
    """A record store call failed or timed out."""


class PartialBatchFailure(DatagenError):
    """Inserting a day's batch failed after the existence check passed."""


class RunInProgress(DatagenError):
    """A generation run is already active in this process."""


class UnitNotFound(DatagenError):
    """The requested serial number is not among the active units."""
