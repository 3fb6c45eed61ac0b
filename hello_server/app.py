from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .responder import respond, log_request


app = FastAPI(
    title="Hello Server",
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    redirect_slashes=False,
)


def raw_path(request: Request) -> str:
    # match on the path as sent, like the fallback server does
    raw = request.scope.get("raw_path")
    if raw is None:
        return request.url.path
    return raw.decode("latin-1").split("?", 1)[0]


def reply_for(request: Request) -> PlainTextResponse:
    reply = respond(request.method, raw_path(request))
    return PlainTextResponse(reply.body, status_code=reply.status, media_type=reply.content_type)


# === Middleware ===


@app.middleware("http")
async def log_requests(request: Request, call_next):
    url = raw_path(request)
    query = request.scope.get("query_string", b"").decode("latin-1")
    if query:
        url = f"{url}?{query}"
    log_request(request.method, url)
    return await call_next(request)


# Unknown paths (404) and known paths hit with another method (405) both
# answer through the responder, same as the fallback server.
@app.exception_handler(StarletteHTTPException)
async def not_found(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    return reply_for(request)


# === Routes ===


@app.get("/")
def hello(request: Request) -> PlainTextResponse:
    return reply_for(request)


@app.get("/good-evening")
def good_evening(request: Request) -> PlainTextResponse:
    return reply_for(request)
