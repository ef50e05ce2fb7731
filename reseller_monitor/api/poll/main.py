# reseller_monitor/api/poll/main.py
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ...db.engine import get_session_maker
from ...services.poll_job import run_poll_cycle
from .models import PollRequest, PollRunResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_poll_request(request: Request) -> PollRequest:
    """
    El cuerpo es opcional: sin cuerpo o con JSON inválido se consultan todos los routers.
    Un router_id mal formado sí es un error del cliente.
    """
    try:
        body = await request.json()
    except ValueError:
        return PollRequest()
    if not isinstance(body, dict):
        return PollRequest()
    try:
        return PollRequest.model_validate(body)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


@router.post("/poll-routers", response_model=PollRunResponse)
async def poll_routers(
    request: Request,
    session_maker: async_sessionmaker = Depends(get_session_maker),
):
    """
    Ejecuta un ciclo de consulta (todos los routers o solo `router_id`)
    y devuelve el reporte. 500 solo si no se pudo cargar la configuración.
    """
    poll_request = await _read_poll_request(request)
    logger.info(f"Poll triggered via API (router_id={poll_request.router_id or 'all'})")
    report = await run_poll_cycle(session_maker, router_id=poll_request.router_id)

    if not report.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=report.to_dict(),
        )
    return PollRunResponse.model_validate(report.to_dict())
