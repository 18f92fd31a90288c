import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from birthday_api.config import Settings, settings as default_settings
from birthday_api.context import AppContext, build_context
from birthday_api.database import connect_or_exit
from birthday_api.routers import lyrics, otp, tts, users
from birthday_api.utils.response import validation_exception_handler

logger = logging.getLogger(__name__)

WELCOME_TEXT = "Birthday Lyrics API is running"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_app(settings: Settings | None = None, context: AppContext | None = None) -> FastAPI:
    settings = settings or (context.settings if context else default_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_context = context or build_context(settings)
        # No traffic without a database: exits the process on failure
        connect_or_exit(app_context.engine)
        app.state.context = app_context
        logger.info("%s started", settings.PROJECT_NAME)
        yield
        await app_context.aclose()
        logger.info("%s stopped", settings.PROJECT_NAME)

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(users.router)
    app.include_router(otp.router)
    app.include_router(lyrics.router)
    app.include_router(tts.router)

    @app.get("/", response_class=PlainTextResponse)
    def home():
        return WELCOME_TEXT

    @app.get("/api-info")
    def api_info():
        routes = sorted(
            f"{method.upper()} {path}"
            for path, operations in app.openapi()["paths"].items()
            if path.startswith("/api/")
            for method in operations
        )
        return {
            "service": settings.PROJECT_NAME,
            "docs_url": app.docs_url,
            "routes": routes,
        }

    return app


configure_logging(default_settings.LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)
