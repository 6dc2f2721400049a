import sys
from datetime import datetime
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from monitor_leads.api.deps import get_http_client
from monitor_leads.api.leads import Modo, load_leads
from monitor_leads.core.dates import now_local
from monitor_leads.core.export import csv_filename, leads_to_csv, whatsapp_link, whatsapp_summary
from monitor_leads.core.metrics import (
    compute_kpis,
    filter_by_team,
    format_phone,
    is_pending,
    lead_sla,
    leads_by_hour,
    leads_by_team,
    list_teams,
    status_distribution,
    team_stats,
)
from monitor_leads.models.lead import Lead

router = APIRouter()

def _lead_row(lead: Lead, now: datetime) -> Dict[str, Any]:
    """Lead pronto para a tabela: telefone formatado + SLA."""
    row = lead.to_dict()
    row["telefone_formatado"] = format_phone(lead.telefone)
    row["sla"] = lead_sla(lead, now=now).model_dump()
    return row

@router.get("/dashboard")
async def dashboard(
    modo: Modo = Query("atendimentos", description="atendimentos | geral"),
    time: Optional[str] = Query("Todos", description="Time/fila; Todos = sem filtro"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """KPIs, séries dos gráficos e tabelas do painel operacional."""
    leads = await load_leads(client, modo)
    now = now_local()
    filtered = filter_by_team(leads, time)

    return {
        "modo": modo,
        "time": time or "Todos",
        "times": list_teams(leads),
        "kpis": compute_kpis(filtered),
        "leadsPorHora": leads_by_hour(filtered),
        "distribuicaoStatus": status_distribution(filtered),
        # comparação entre times usa a lista completa
        "leadsPorTime": leads_by_team(leads),
        "leads": [_lead_row(l, now) for l in filtered],
        "pendentes": [_lead_row(l, now) for l in filtered if is_pending(l)],
    }

@router.get("/relatorios")
async def relatorios(
    modo: Modo = Query("atendimentos"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Matriz de performance por time e tabela de auditoria do SLA."""
    leads = await load_leads(client, modo)
    now = now_local()
    return {
        "geradoEm": now.isoformat(),
        "times": team_stats(leads, now=now),
        "leads": [_lead_row(l, now) for l in leads],
    }

@router.get("/relatorios/csv")
async def relatorios_csv(
    modo: Modo = Query("atendimentos"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    leads = await load_leads(client, modo)
    now = now_local()
    content = leads_to_csv(leads, now=now)
    print(f"[RELATORIOS] ✅ CSV gerado com {len(leads)} leads", file=sys.stderr)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename(now)}"'},
    )

@router.get("/relatorios/whatsapp")
async def relatorios_whatsapp(
    modo: Modo = Query("atendimentos"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Texto do resumo diário e o link wa.me para compartilhar."""
    leads = await load_leads(client, modo)
    texto = whatsapp_summary(leads, now=now_local())
    return {"texto": texto, "url": whatsapp_link(texto)}
