class QStashError(Exception):
    pass


class QStashRejectedError(QStashError):
    """Publish request was answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"HTTP {status_code}: {body[:200]}")
        self.status_code = status_code
