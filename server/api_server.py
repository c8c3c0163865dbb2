"""FastAPI application entry point for the portfolio chat agent."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.helper.RateLimiter import RateLimiter
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.mail.MailClientManager import MailClientManager
from shared.clients.store.StoreClientManager import StoreClientManager
from shared.tools.ToolProviderManager import ToolProviderManager
from services.admission.AdmissionService import AdmissionService
from services.agent.AgentService import AgentService
from services.rag.HydeGenerator import HydeGenerator
from services.rag.RagPipeline import RagPipeline
from services.session.SessionStore import SessionStore
from server.dependencies.http import DEFAULT_ALLOWED_ORIGINS
from server.routers.ChatRouter import router as chat_router
from server.routers.HealthRouter import router as health_router
from server.routers.TokenRouter import router as token_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    helper_config = HelperConfig(logger=logging)
    app.state.logging = logging
    app.state.helper_config = helper_config
    app.state.app_version = app_version
    app.state.allowed_origins = helper_config.get_list_val("CORS_ALLOWED_ORIGINS", default=DEFAULT_ALLOWED_ORIGINS)
    app.state.chat_rate_limiter = RateLimiter(
        max_requests=helper_config.get_number_val("CHAT_RATE_LIMIT_MAX", default=30),
        window_seconds=helper_config.get_number_val("CHAT_RATE_LIMIT_WINDOW", default=600),
    )
    app.state.agent_service = None
    app.state.admission_service = None

    llm_client = LLMClientManager(helper_config=helper_config).get_client()
    mail_client = MailClientManager(helper_config=helper_config).get_client()
    store_client = StoreClientManager(helper_config=helper_config).get_client()
    http_clients = [client for client in (llm_client, mail_client) if client is not None]

    logging.info("Booting all clients...")
    for client in http_clients:
        await client.boot()
    await store_client.boot()
    logging.info("All clients booted successfully.")
    app.state.llm_client = llm_client

    admin_key = helper_config.get_optional_string_val("AUTH_ADMIN_KEY")
    signing_secret = helper_config.get_optional_string_val("AUTH_SIGNING_SECRET") or admin_key
    missing = [
        name
        for name, value in (
            ("LLM_%s_API_KEY" % llm_client.get_engine_name().upper(), llm_client.has_api_key()),
            ("AUTH_SIGNING_SECRET", signing_secret),
        )
        if not value
    ]
    if not admin_key:
        logging.warning("AUTH_ADMIN_KEY is not set, admin token actions will answer 500.")

    if missing:
        logging.critical("Missing required secret(s): %s. /chat and /token will answer 500.", ", ".join(missing))
    else:
        session_store = SessionStore(helper_config=helper_config, store=store_client)
        rag_pipeline = RagPipeline(
            helper_config=helper_config,
            hyde_generator=HydeGenerator(helper_config=helper_config, llm_client=llm_client),
        )
        app.state.admission_service = AdmissionService(
            helper_config=helper_config,
            session_store=session_store,
            signing_secret=signing_secret,
            admin_key=admin_key,
            mail_client=mail_client,
        )
        app.state.agent_service = AgentService(
            helper_config=helper_config,
            llm_client=llm_client,
            tool_manager=ToolProviderManager(helper_config=helper_config, rag_pipeline=rag_pipeline),
            session_store=session_store,
            signing_secret=signing_secret,
        )

    # while the app is running...
    yield

    # when the app shuts down, let running turns and notifications finish, then close clients
    logging.info("Shutting down, closing all clients...")
    for service in (app.state.agent_service, app.state.admission_service):
        if service is not None:
            await service.drain()
    for client in http_clients:
        await client.close()
    await store_client.close()
    logging.info("All clients closed.")


app = FastAPI(
    title="portfolio_chat_agent",
    description=(
        "Token-gated chat agent that answers questions about a personal portfolio. "
        "Answers stream from POST /chat as server-sent events; access tokens are "
        "requested, approved and revoked through POST /token."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.include_router(chat_router)
app.include_router(token_router)
app.include_router(health_router)


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting portfolio_chat_agent API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
