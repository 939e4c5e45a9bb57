class UptimeError(Exception):
    """Base class for errors raised while computing uptime reports"""


class InvalidWindowSize(UptimeError, ValueError):
    def __init__(self, window_size):
        self.window_size = window_size
        super().__init__(f"Window size must be a positive integer number of seconds, got {window_size!r}")


class UnparseableTimestamp(UptimeError, ValueError):
    def __init__(self, value, row_id=None):
        self.value = value
        self.row_id = row_id
        location = f" (row {row_id})" if row_id is not None else ""
        super().__init__(f"Could not parse timestamp {value!r}{location}")


class ConfigurationError(UptimeError):
    pass
