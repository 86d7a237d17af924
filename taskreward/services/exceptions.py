"""Storage-level failures raised by the task store, the user ledger and the completion engine."""


class StorageError(Exception):
    pass


class TaskNotFoundError(StorageError):
    pass


class TaskAlreadyClosedError(StorageError):
    pass


class UserNotFoundError(StorageError):
    pass


class LoginTakenError(StorageError):
    pass


class TransactionTimeoutError(StorageError):
    pass
