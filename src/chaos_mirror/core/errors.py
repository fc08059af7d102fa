class MirrorError(Exception):
    """Base class for synchronization errors."""


class ProgramIndexError(MirrorError):
    """The program index could not be fetched or decoded. Fatal to the run."""


class FetchError(MirrorError):
    """A program's dataset could not be downloaded."""


class ArchiveError(MirrorError):
    """A downloaded dataset archive is corrupt or unsafe to extract."""


class SnapshotCommitError(MirrorError):
    """The staged dataset could not be promoted to the snapshot path."""


class DeltaTargetError(MirrorError):
    """The delta output directory already holds content."""
