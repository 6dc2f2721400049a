import sys
from typing import List, Literal

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from monitor_leads.api.deps import get_http_client
from monitor_leads.core.imoview import MissingApiKey, get_all_leads, get_attendance_leads
from monitor_leads.models.lead import Lead

router = APIRouter()

Modo = Literal["atendimentos", "geral"]

class ProxyError(Exception):
    """Erro devolvido ao front como {"error": ...}."""
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

async def load_leads(client: httpx.AsyncClient, modo: str = "atendimentos", include_raw: bool = False) -> List[Lead]:
    """
    Carrega os leads da visão pedida.

    Falhas por finalidade já viram lista vazia lá embaixo; aqui só sobram
    a falta de chave e erros inesperados, que viram ProxyError (500).
    """
    try:
        if modo == "geral":
            return await get_all_leads(client, include_raw=include_raw)
        return await get_attendance_leads(client, include_raw=include_raw)
    except MissingApiKey as e:
        print(f"[PROXY] ❌ {e}", file=sys.stderr)
        raise ProxyError(str(e))
    except Exception as e:
        print(f"[PROXY] ❌ Erro no proxy de leads: {type(e).__name__}: {e}", file=sys.stderr)
        raise ProxyError("Falha interna ao conectar com a API")

@router.get("/proxy-leads")
async def proxy_leads(
    raw: bool = Query(False, description="Inclui o registro original do Imoview em _raw"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    leads = await load_leads(client, "atendimentos", include_raw=raw)
    return {"leads": [l.to_dict() for l in leads]}

@router.get("/proxy-leads-all")
async def proxy_leads_all(
    raw: bool = Query(False, description="Inclui o registro original do Imoview em _raw"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    leads = await load_leads(client, "geral", include_raw=raw)
    return {"leads": [l.to_dict() for l in leads]}
