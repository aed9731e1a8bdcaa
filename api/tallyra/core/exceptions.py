class TallyraError(Exception):
    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidAmount(TallyraError):
    pass


class NoMatchingItem(TallyraError):
    pass


class InvalidTransition(TallyraError):
    pass


class CommitFailure(TallyraError):
    pass


class StockConflict(TallyraError):
    pass


class PartialCommitFailure(TallyraError):
    """Sale persisted, stock not adjusted. Retrying would record it twice."""

    def __init__(self, message: str, transaction, details: dict | None = None):
        super().__init__(message, details)
        self.transaction = transaction
