import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from monitor_leads.core.config import settings
from monitor_leads.core.dates import now_local, parse_iso
from monitor_leads.models.lead import Lead, SlaInfo

STATUS_EM_ATENDIMENTO = ("em atendimento", "contato feito")

def _duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}min"
    return f"{minutes // 60}h {minutes % 60}min"

def sla_info(data_entrada: str, primeira_interacao: Optional[str] = None, now: Optional[datetime] = None) -> SlaInfo:
    """
    Calcula o tempo de espera do lead.

    Sem primeira interação, o relógio corre até agora. O lead fica
    "Atrasado" quando a espera atinge SLA_LIMITE_MINUTOS (limite inclusivo).
    """
    now = now or now_local()
    entrada = parse_iso(data_entrada) or now
    fim = parse_iso(primeira_interacao) if primeira_interacao else None
    respondido = fim is not None

    minutos = int(((fim or now) - entrada).total_seconds() // 60)
    atrasado = minutos >= settings.SLA_LIMITE_MINUTOS

    if respondido:
        label = f"Atendido em {_duration(minutos)}"
    else:
        label = f"Esperando há {_duration(minutos)}"

    return SlaInfo(
        atrasado=atrasado,
        label=label,
        status="Atrasado" if atrasado else "No Prazo",
        minutos=minutos,
    )

def lead_sla(lead: Lead, now: Optional[datetime] = None) -> SlaInfo:
    return sla_info(lead.data_entrada, lead.primeira_interacao, now=now)

def is_pending(lead: Lead) -> bool:
    """Pendente = chegou e ainda não teve nenhuma interação."""
    return not lead.primeira_interacao

def is_scheduled(lead: Lead) -> bool:
    return "visita" in lead.status.lower()

def is_in_service(lead: Lead) -> bool:
    return lead.status.lower() in STATUS_EM_ATENDIMENTO

def _percent(part: int, total: int, empty: str) -> str:
    if total <= 0:
        return empty
    return f"{part / total * 100:.1f}%"

def compute_kpis(leads: List[Lead]) -> Dict[str, Any]:
    total = len(leads)
    agendamentos = sum(1 for l in leads if is_scheduled(l))
    return {
        "totalLeads": total,
        "agendamentos": agendamentos,
        "atendimento": sum(1 for l in leads if is_in_service(l)),
        "pendentes": sum(1 for l in leads if is_pending(l)),
        "conversao": _percent(agendamentos, total, "0%"),
    }

def list_teams(leads: List[Lead]) -> List[str]:
    teams: List[str] = ["Todos"]
    for l in leads:
        team = l.time or "Geral"
        if team not in teams:
            teams.append(team)
    return teams

def filter_by_team(leads: List[Lead], team: Optional[str]) -> List[Lead]:
    if not team or team == "Todos":
        return list(leads)
    return [l for l in leads if l.time == team]

def leads_by_hour(leads: List[Lead]) -> List[Dict[str, Any]]:
    counts: Dict[int, int] = {}
    for l in leads:
        d = parse_iso(l.data_entrada)
        if d is None:
            continue
        counts[d.hour] = counts.get(d.hour, 0) + 1
    return [{"hour": f"{h}:00", "leads": counts[h]} for h in sorted(counts)]

def status_distribution(leads: List[Lead]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for l in leads:
        counts[l.status] = counts.get(l.status, 0) + 1
    return [{"name": name, "value": value} for name, value in counts.items()]

def leads_by_team(leads: List[Lead]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for l in leads:
        team = l.time or "Geral"
        counts[team] = counts.get(team, 0) + 1
    return [{"name": name, "leads": value} for name, value in counts.items()]

def team_stats(leads: List[Lead], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Matriz de performance por time.

    Conta como agendamento qualquer status com "visita" ou "agendado".
    Ordenado pelo volume de leads, maior primeiro.
    """
    now = now or now_local()
    stats: Dict[str, Dict[str, Any]] = {}
    for l in leads:
        name = l.time or "Geral"
        current = stats.setdefault(name, {
            "name": name,
            "total": 0,
            "slasCritical": 0,
            "agendamentos": 0,
            "efficiency": "0%",
        })
        current["total"] += 1
        if lead_sla(l, now=now).atrasado:
            current["slasCritical"] += 1
        status = l.status.lower()
        if "visita" in status or "agendado" in status:
            current["agendamentos"] += 1

    for stat in stats.values():
        stat["efficiency"] = _percent(stat["agendamentos"], stat["total"], "0.0%")

    return sorted(stats.values(), key=lambda s: s["total"], reverse=True)

def format_phone(phone: Optional[str]) -> str:
    """Formata telefone brasileiro: (11) 99999-9999 ou (11) 9999-9999."""
    if not phone:
        return "--"
    # Já veio formatado
    if "(" in phone and ")" in phone:
        return phone
    digits = re.sub(r"\D", "", phone)
    if len(digits) < 10:
        return phone
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
