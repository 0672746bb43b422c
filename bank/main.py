import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from bank.config import settings
from bank.database import Base, engine
from bank.errors import InternalConsistencyError
from bank.logging_config import setup_logging
from bank.routes import router
import bank.models  # noqa: F401  registers the tables on Base.metadata

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.service_name)
    Base.metadata.create_all(bind=engine)
    yield
    engine.dispose()


app = FastAPI(title="Single-use Card Payments Service", lifespan=lifespan)

app.include_router(router)


# Internal details stay in the logs, clients only get the generic message
@app.exception_handler(InternalConsistencyError)
async def internal_consistency_handler(request: Request, exc: InternalConsistencyError):
    logger.error("Internal consistency error", extra={"path": request.url.path, "detail": str(exc)})
    return JSONResponse(status_code=500, content={"error": "Internal Error"})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Ledger store error", exc_info=exc, extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": "Internal Error"})


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
