import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from apps.helpdesk.api.routes import ping, tickets
from apps.helpdesk.core.config import get_settings, to_async_dsn
from apps.helpdesk.core.logging import configure_logging, init_tracer, shutdown_tracer
from apps.helpdesk.middleware import RBACMiddleware
from apps.helpdesk.response import install_exception_handlers
from apps.helpdesk.tickets.repository import TicketRepository
from apps.helpdesk.tickets.service import TicketService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    app.state.logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)

    db_engine = create_async_engine(to_async_dsn(settings.database_dsn), future=True)
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
    app.state.ticket_service = None
    try:
        repository = TicketRepository(session_factory, engine=db_engine)
        service = TicketService(
            repository,
            capacity=settings.technician_capacity,
            serialize_assignments=settings.strict_capacity,
        )
        await service.ensure_schema()
        app.state.ticket_service = service
    except Exception:
        logger.exception("Ticket service initialisation failed; ticket routes will answer 503")
    try:
        yield
    finally:
        await db_engine.dispose()
        shutdown_tracer(tracer_provider)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_middleware(RBACMiddleware)
    install_exception_handlers(app)
    app.include_router(ping.router)
    app.include_router(tickets.router)
    return app


app = create_app()
