class PipelineError(Exception):
    pass


class QueueEmpty(PipelineError):
    """Nothing to rotate this tick. Not a failure."""

    def __init__(self, queue_key: str) -> None:
        super().__init__(f"queue {queue_key!r} is empty")
        self.queue_key = queue_key


class MissingTokenAddressError(PipelineError, ValueError):
    pass
