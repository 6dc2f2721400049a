import csv
import io
from datetime import datetime
from typing import Dict, List, Optional
from urllib.parse import quote

from monitor_leads.core.dates import now_local, parse_iso
from monitor_leads.core.metrics import lead_sla
from monitor_leads.models.lead import Lead

# mesmo conjunto de caracteres livres do encodeURIComponent
URI_SAFE = "-_.!~*'()"

CSV_HEADERS = [
    "ID", "Data Entrada", "Nome", "Telefone", "Email",
    "Time", "Status", "Data Interação", "SLA Label", "SLA Crítico",
]

def _fmt_datetime(value: Optional[str]) -> str:
    d = parse_iso(value)
    return d.strftime("%d/%m/%Y %H:%M:%S") if d else ""

def csv_filename(now: Optional[datetime] = None) -> str:
    now = now or now_local()
    return f"relatorio_leads_{now.date().isoformat()}.csv"

def leads_to_csv(leads: List[Lead], now: Optional[datetime] = None) -> str:
    """
    Gera o CSV do relatório. Campos texto vão entre aspas; o id numérico não.
    """
    now = now or now_local()
    buf = io.StringIO()
    w = csv.writer(buf, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    w.writerow(CSV_HEADERS)
    for l in leads:
        sla = lead_sla(l, now=now)
        w.writerow([
            l.id,
            _fmt_datetime(l.data_entrada),
            l.nome,
            l.telefone,
            l.email or "",
            l.time,
            l.status,
            _fmt_datetime(l.primeira_interacao),
            sla.label,
            "SIM" if sla.atrasado else "NAO",
        ])
    return buf.getvalue()

def whatsapp_summary(leads: List[Lead], now: Optional[datetime] = None) -> str:
    """
    Resumo diário para colar no WhatsApp.

    "Hoje" considera a data de entrada no fuso local; o total de atrasados
    considera todos os leads carregados.
    """
    now = now or now_local()
    today = now.date()

    leads_today = [l for l in leads if (parse_iso(l.data_entrada) or now).date() == today]
    total_late = sum(1 for l in leads if lead_sla(l, now=now).atrasado)

    team_counts: Dict[str, int] = {}
    for l in leads_today:
        team = l.time or "Sem Time"
        team_counts[team] = team_counts.get(team, 0) + 1

    team_lines = "\n".join(
        f"• {name}: {count}"
        for name, count in sorted(team_counts.items(), key=lambda kv: kv[1], reverse=True)
    )

    return (
        f"📊 *Relatório Donna - {now.strftime('%d/%m/%Y')}*\n"
        f"\n"
        f"✅ *Total Hoje:* {len(leads_today)} leads\n"
        f"\n"
        f"📅 *Entrada por Time:*\n"
        f"{team_lines or '• Nenhum lead hoje'}\n"
        f"\n"
        f"🚨 *Auditoria SLA:* {total_late} atrasados (Geral)\n"
        f"🔗 _Sistema Lead Intelligence_"
    )

def whatsapp_link(text: str) -> str:
    return f"https://wa.me/?text={quote(text, safe=URI_SAFE)}"
