class StorageCapacityError(RuntimeError):
    """The vector store could not be persisted, not even as metadata-only records."""
