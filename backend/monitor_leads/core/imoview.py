import asyncio
import sys
from typing import Any, Dict, List, Optional

import httpx

from monitor_leads.core.config import settings
from monitor_leads.core.normalize import (
    extract_list,
    normalize_attendance,
    normalize_many,
    normalize_raw_lead,
    sort_by_entry,
)
from monitor_leads.models.lead import Lead

# Finalidades do Imoview
FINALIDADE_ALUGUEL = 1
FINALIDADE_VENDA = 2

ATENDIMENTOS_PATH = "/Atendimento/RetornarAtendimentos"
# Não há documentação única para leads sem atendimento; tentamos nesta ordem
LEADS_BRUTOS_PATHS = (
    "/Lead/RetornarLeads",
    "/Leads/RetornarLeads",
    "/Portal/RetornarLeads",
)

class MissingApiKey(RuntimeError):
    """IMOVIEW_API_KEY não configurada."""

def _headers() -> Dict[str, str]:
    """Headers das requisições ao Imoview (a chave vai no header "chave")."""
    if not settings.IMOVIEW_API_KEY:
        raise MissingApiKey("API Key não configurada no servidor (IMOVIEW_API_KEY)")
    return {
        "chave": settings.IMOVIEW_API_KEY,
        "Content-Type": "application/json",
    }

def new_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=settings.IMOVIEW_BASE_URL, timeout=settings.IMOVIEW_TIMEOUT)

async def fetch_atendimentos(
    client: httpx.AsyncClient,
    finalidade: int,
    por_pagina: int,
    situacao: int = 0,
) -> List[Dict[str, Any]]:
    """
    Busca uma página de atendimentos por finalidade (1-Aluguel, 2-Venda).

    Qualquer falha vira lista vazia: uma finalidade fora do ar não derruba a outra.
    """
    params = {
        "numeroPagina": 1,
        "numeroRegistros": por_pagina,
        "finalidade": finalidade,
        "situacao": situacao,  # 0 = todas
    }
    try:
        r = await client.get(ATENDIMENTOS_PATH, headers=_headers(), params=params)
        if r.status_code != 200:
            print(f"[IMOVIEW] ⚠️ Erro (finalidade {finalidade}): {r.status_code} - {r.text[:300]}", file=sys.stderr)
            return []
        data = r.json()
    except MissingApiKey:
        raise
    except Exception as e:
        print(f"[IMOVIEW] ❌ Exceção ao buscar finalidade {finalidade}: {type(e).__name__}: {e}", file=sys.stderr)
        return []

    items = extract_list(data)
    print(f"[IMOVIEW] ✅ Finalidade {finalidade}: {len(items)} atendimentos", file=sys.stderr)
    return items

async def fetch_leads_brutos(client: httpx.AsyncClient) -> List[Dict[str, Any]]:
    """Tenta os endpoints de leads conhecidos; o primeiro que trouxer algo ganha."""
    headers = _headers()
    for path in LEADS_BRUTOS_PATHS:
        try:
            r = await client.get(path, headers=headers)
            if r.status_code != 200:
                continue
            items = extract_list(r.json())
        except Exception as e:
            print(f"[IMOVIEW] ⚠️ {path} falhou: {type(e).__name__}: {e}", file=sys.stderr)
            continue
        if items:
            print(f"[IMOVIEW] ✅ {len(items)} leads brutos via {path}", file=sys.stderr)
            return items
    return []

async def get_attendance_leads(
    client: httpx.AsyncClient,
    por_pagina: Optional[int] = None,
    include_raw: bool = False,
) -> List[Lead]:
    """Atendimentos de aluguel e venda, normalizados e ordenados (mais recentes primeiro)."""
    por_pagina = por_pagina or settings.ATENDIMENTOS_POR_PAGINA
    _headers()  # falha cedo se não houver chave

    aluguel, venda = await asyncio.gather(
        fetch_atendimentos(client, FINALIDADE_ALUGUEL, por_pagina),
        fetch_atendimentos(client, FINALIDADE_VENDA, por_pagina),
    )
    leads = normalize_many(aluguel + venda, normalize_attendance, include_raw=include_raw)
    return sort_by_entry(leads)

async def get_all_leads(client: httpx.AsyncClient, include_raw: bool = False) -> List[Lead]:
    """
    Visão "geral": leads brutos (sem atendimento) + atendimentos.

    Usa página maior que a visão de atendimentos.
    """
    _headers()
    por_pagina = settings.ATENDIMENTOS_POR_PAGINA_GERAL

    aluguel, venda, brutos = await asyncio.gather(
        fetch_atendimentos(client, FINALIDADE_ALUGUEL, por_pagina),
        fetch_atendimentos(client, FINALIDADE_VENDA, por_pagina),
        fetch_leads_brutos(client),
    )
    leads = (
        normalize_many(brutos, normalize_raw_lead, include_raw=include_raw)
        + normalize_many(aluguel + venda, normalize_attendance, include_raw=include_raw)
    )
    return sort_by_entry(leads)
