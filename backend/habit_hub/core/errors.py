from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from habit_hub.core.llm import LLMError
from habit_hub.services.habit_store import EntityNotFoundError, HabitStoreError
import logging

logger = logging.getLogger(__name__)

AI_FAILURE_MESSAGE = "The AI assistant failed to process your request. Please try again later."


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to user-facing responses without leaking internals"""

    @app.exception_handler(HabitStoreError)
    async def _store_error(request: Request, exc: HabitStoreError):
        if exc.action.startswith("load"):
            detail = "Could not load your data. Please try again later."
        else:
            detail = "Could not save your changes. Please try again later."
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": detail})

    @app.exception_handler(EntityNotFoundError)
    async def _not_found(request: Request, exc: EntityNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": f"{exc.kind} not found"})

    @app.exception_handler(LLMError)
    async def _llm_error(request: Request, exc: LLMError):
        logger.error(f"AI request failed on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"success": False, "detail": AI_FAILURE_MESSAGE}
        )
