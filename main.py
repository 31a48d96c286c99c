import inspect
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from openai import AsyncOpenAI

from dal.history_dal import KeyValueDAL
from routes.analysis_route import router as analysis_router
from routes.chat_route import router as chat_router
from routes.history_route import router as history_router
from routes.view_route import router as view_router
from services.history_store import ResultStore
from services.openai.chat_service import RadiologistChatService
from services.openai.xray_classifier import XrayClassifier
from services.workspace import Workspace
from utils.config import Settings
from utils.database_init import AsyncDatabaseInitializer

load_dotenv()  # Load environment variables from .env file if present


def _build_openai_client(settings: Settings) -> AsyncOpenAI:
    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")
    try:
        return AsyncOpenAI(api_key=settings.openai_api_key)
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc


async def _close_client(client: Any) -> None:
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        result = aclose()
        if inspect.isawaitable(result):
            await result
    except Exception as exc:
        # Shutdown errors must not mask the reason the app is stopping.
        logging.warning("Error while closing the OpenAI client: %s", exc)


def create_app(settings: Optional[Settings] = None, openai_client: Optional[Any] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    `openai_client` replaces the client built from OPENAI_API_KEY, which lets
    callers supply their own transport.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan manager to initialize:
          - the SQLite database (kept across restarts, at DATABASE_DIR/history.db)
          - the history store, loaded from its storage key
          - the OpenAI async client and the services built on it
        and attach the resulting workspace to `app.state`.
        """
        db_initializer = AsyncDatabaseInitializer(settings.database_dir)
        await db_initializer.ensure_database()
        app.state.db_initializer = db_initializer

        store = ResultStore(KeyValueDAL(db_initializer), key=settings.history_key)
        await store.load()

        owns_client = openai_client is None
        client = _build_openai_client(settings) if owns_client else openai_client
        app.state.openai_client = client

        workspace = Workspace(
            store,
            XrayClassifier(client, model=settings.openai_model),
            RadiologistChatService(client, model=settings.openai_model),
            settings,
        )
        app.state.workspace = workspace

        try:
            yield
        finally:
            await workspace.aclose()
            if owns_client:
                await _close_client(client)

    app = FastAPI(title="NeuroScan X-ray Assistant", lifespan=lifespan)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports the history size and OpenAI client presence.
        """
        workspace = getattr(request.app.state, "workspace", None)
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        return {
            "ok": True,
            "history_records": len(workspace.store) if workspace else 0,
            "openai_available": has_openai,
        }

    app.include_router(view_router)
    app.include_router(analysis_router)
    app.include_router(history_router)
    app.include_router(chat_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
