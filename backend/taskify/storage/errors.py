class StoreError(Exception):
    """A store could not be read or written (backend down, corrupt file, ...)."""


class DuplicateRecord(StoreError):
    pass
