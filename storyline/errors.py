# storyline/errors.py — persistence errors surfaced to the engine and the UI


class StoreError(Exception):
    pass


class CommitError(StoreError):
    """A single event's change could not be made durable."""


class ImportFormatError(StoreError):
    pass
