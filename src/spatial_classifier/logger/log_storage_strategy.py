class LogStorageStrategy:
    """
    Destination for layout log entries.

    ``Logger`` formats nothing itself: it hands each entry's parts to the
    installed strategy, which decides the line format and where it goes.
    Subclasses override both methods.
    """

    def store_log(self, message, priority, timestamp):
        """
        Record one entry.

        Args:
            message (str): Event text, e.g. a zone change or a rebuild.
            priority (str): ``Logger.LogPriority`` member name.
            timestamp (str): Local time as ``%Y-%m-%d %H:%M:%S``.
        """
        raise NotImplementedError(f"{type(self).__name__} does not store logs")

    def flush_logs(self):
        """Discard everything recorded so far."""
        raise NotImplementedError(f"{type(self).__name__} does not flush logs")
