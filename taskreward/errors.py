"""
Domain errors surfaced by RewardService.

Boundaries (HTTP handlers, the admin bot) catch RewardError and map `code`
to a response; everything else is a bug.
"""


class RewardError(Exception):
    code = "internal"
    message = "внутренняя ошибка сервера"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class InvalidArgument(RewardError):
    code = "invalid_argument"
    message = "некорректные параметры запроса"


class TaskNotFound(RewardError):
    code = "task_not_found"
    message = "задача не найдена"


class TaskAlreadyCompleted(RewardError):
    code = "task_already_completed"
    message = "задача уже выполнена"


class UserNotFound(RewardError):
    code = "user_not_found"
    message = "пользователь не найден"


class UserAlreadyExists(RewardError):
    code = "user_already_exists"
    message = "пользователь с таким логином уже существует"


class ReferrerNotFound(RewardError):
    code = "referrer_not_found"
    message = "пользователь с указанным refer_id не найден"


class IncorrectPassword(RewardError):
    code = "incorrect_password"
    message = "неправильный логин или пароль"


class Internal(RewardError):
    pass
