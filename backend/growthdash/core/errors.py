class UpstreamFetchError(Exception):
    """The warehouse query failed or came back empty."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class MalformedSeriesError(ValueError):
    """A single warehouse row failed validation and was skipped."""

    def __init__(self, source: str, row, reason: str):
        super().__init__(f"{source}: malformed row {row!r} ({reason})")
        self.source = source
        self.row = row
        self.reason = reason
