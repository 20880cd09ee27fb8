# main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from learnhub.api.endpoints import auth, check, courses, tasks, themes, users
from learnhub.core.config import settings
from learnhub.core.exceptions import LearnHubException
from learnhub.core.limiter import limiter
from learnhub.crud.crud_role import seed_reference_data
from learnhub.db.session import dispose_engine, get_session_local

# Models must be imported so Base.metadata knows every table
from learnhub.db.base import Base  # noqa
import learnhub.models  # noqa


app = FastAPI(
    title="LearnHub API",
    description="Programming courses with Yandex login and automatic grading",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

origins = [
    settings.FRONTEND_URL,
    "http://localhost:5173",
    "http://localhost:3000",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LearnHubException)
async def learnhub_exception_handler(request: Request, exc: LearnHubException) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    content_length = response.headers.get("content-length", "-")
    user_agent = request.headers.get("user-agent", "")
    logger.bind(name="HTTP").info(
        f"{request.method} {request.url.path} {response.status_code} {content_length} - {user_agent}"
    )
    return response


api_prefix = "/api"

app.include_router(auth.router, prefix=f"{api_prefix}/auth", tags=["Authentication"])
app.include_router(users.router, prefix=f"{api_prefix}/user", tags=["Users"])
app.include_router(courses.router, prefix=f"{api_prefix}/learning/course", tags=["Courses"])
app.include_router(themes.router, prefix=f"{api_prefix}/learning/theme", tags=["Themes"])
app.include_router(tasks.router, prefix=f"{api_prefix}/learning/task", tags=["Tasks"])
app.include_router(check.router, prefix=f"{api_prefix}/check", tags=["Check"])


@app.on_event("startup")
async def startup_event():
    SessionLocal = get_session_local()
    async with SessionLocal() as db:
        await seed_reference_data(db)
    logger.info(f"LearnHub API started ({settings.ENVIRONMENT})")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down: disposing database engine...")
    await dispose_engine()
    logger.info("Database engine disposed.")


@app.get("/")
def read_root():
    return {"message": "LearnHub API is running!"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.START_PORT)
