class RevertError(Exception):
    """A rejected call. Nothing it touched has changed."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
