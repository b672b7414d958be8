class SourceUnavailable(RuntimeError):
    """A single knowledge source could not produce entries.

    Raised inside a source (missing config, bad payload, storage fault) and
    caught at the aggregation boundary, where it becomes an empty contribution.
    """

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason
