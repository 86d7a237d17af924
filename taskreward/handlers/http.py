import json
import logging

from aiohttp import web

from taskreward import errors
from taskreward.auth import TokenIssuer
from taskreward.services.rewards import RewardService

logger = logging.getLogger(__name__)

SERVICE_KEY = web.AppKey("service", RewardService)
ISSUER_KEY = web.AppKey("issuer", TokenIssuer)

_STATUS_BY_ERROR = {
    errors.InvalidArgument: 400,
    errors.ReferrerNotFound: 400,
    errors.IncorrectPassword: 401,
    errors.TaskNotFound: 404,
    errors.UserNotFound: 404,
    errors.TaskAlreadyCompleted: 409,
    errors.UserAlreadyExists: 409,
}

routes = web.RouteTableDef()


def respond(status: int, message: str, **payload) -> web.Response:
    return web.json_response({"status": 200 <= status < 300, "message": message, **payload}, status=status)


def respond_error(e: errors.RewardError) -> web.Response:
    status = _STATUS_BY_ERROR.get(type(e), 500)
    if status == 500:
        return respond(500, errors.Internal.message)
    return respond(status, str(e))


def _positive_int(raw: str | None, what: str) -> int:
    try:
        value = int(raw or "")
    except ValueError:
        raise errors.InvalidArgument(f"некорректный {what}") from None
    if value <= 0:
        raise errors.InvalidArgument(f"некорректный {what}")
    return value


async def _credentials(request: web.Request) -> tuple[str, str]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise errors.InvalidArgument("неверный формат JSON") from None
    if not isinstance(body, dict):
        raise errors.InvalidArgument("неверный формат JSON")
    login, password = body.get("login"), body.get("password")
    if not isinstance(login, str) or not isinstance(password, str) or not login or not password:
        raise errors.InvalidArgument("логин и пароль обязательны")
    return login, password


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except errors.RewardError as e:
        if isinstance(e, errors.Internal):
            logger.warning("%s %s -> internal error", request.method, request.path)
        return respond_error(e)


@web.middleware
async def jwt_middleware(request: web.Request, handler):
    if not request.path.startswith("/users/"):
        return await handler(request)

    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    claims = None
    if scheme.lower() == "bearer" and token:
        claims = request.app[ISSUER_KEY].decode_token(token.strip())
    if claims is None:
        return respond(401, "Unauthorized")

    request["claims"] = claims
    return await handler(request)


@routes.post("/auth/register")
async def register(request: web.Request) -> web.Response:
    login, password = await _credentials(request)
    raw_refer = request.query.get("referID", "")
    refer_id = 0
    if raw_refer:
        try:
            refer_id = int(raw_refer)
        except ValueError:
            raise errors.InvalidArgument("некорректный refer_id") from None

    user = await request.app[SERVICE_KEY].register_user(login, password, refer_id)
    return respond(201, "Пользователь успешно зарегистрирован", user=user.to_dict())


@routes.post("/auth/login")
async def login(request: web.Request) -> web.Response:
    login_, password = await _credentials(request)
    user = await request.app[SERVICE_KEY].authenticate_user(login_, password)
    token = request.app[ISSUER_KEY].create_token(user.id, user.login)
    return respond(200, "Пользователь успешно авторизован", token=token)


@routes.get("/users/{user_id}/status")
async def user_status(request: web.Request) -> web.Response:
    user_id = _positive_int(request.match_info["user_id"], "user_id")
    user = await request.app[SERVICE_KEY].get_user(user_id)
    return respond(200, "OK", user=user.to_dict())


@routes.post("/users/{user_id}/tasks/{task_id}/complete")
async def complete_task(request: web.Request) -> web.Response:
    user_id = _positive_int(request.match_info["user_id"], "user_id")
    task_id = _positive_int(request.match_info["task_id"], "task_id")
    task = await request.app[SERVICE_KEY].complete_task(task_id, user_id)
    return respond(200, "Задача выполнена", task=task.to_dict())


@routes.get("/users/leaderboard")
async def leaderboard(request: web.Request) -> web.Response:
    leaders = await request.app[SERVICE_KEY].get_leaderboard()
    if not leaders:
        return respond(200, "Пользователи не найдены", leaders=[])
    return respond(
        200,
        f"Доска лидеров\nКол-во: {len(leaders)}",
        leaders=[{"id": u.id, "login": u.login, "balance": u.balance} for u in leaders],
    )


@routes.get("/users/tasks/activetasks")
async def active_tasks(request: web.Request) -> web.Response:
    tasks = await request.app[SERVICE_KEY].get_active_tasks()
    if not tasks:
        return respond(200, "Активные задачи не найдены", tasks=[])
    return respond(
        200,
        f"Список активных задач\nКол-во задач: {len(tasks)}",
        tasks=[t.to_dict() for t in tasks],
    )


def create_app(service: RewardService, issuer: TokenIssuer) -> web.Application:
    app = web.Application(middlewares=[error_middleware, jwt_middleware])
    app[SERVICE_KEY] = service
    app[ISSUER_KEY] = issuer
    app.add_routes(routes)
    return app
