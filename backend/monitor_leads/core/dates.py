import re
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as dtparser

from monitor_leads.core.config import settings

ISO_WITH_T = re.compile(r"^\d{4}-\d{2}-\d{2}T")
ISO_WITH_SPACE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?)?$")

def local_tz():
    # Remove ":" inicial que alguns ambientes colocam no TZ
    name = (settings.TIMEZONE or "").strip().lstrip(":")
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc

def now_local() -> datetime:
    """Agora no fuso configurado, sem tzinfo (mesmo formato das datas do Imoview)."""
    return datetime.now(local_tz()).replace(tzinfo=None, microsecond=0)

def now_iso() -> str:
    return now_local().isoformat()

def _build(year, month, day, hour="0", minute="0", second="0") -> Optional[str]:
    try:
        d = datetime(int(year), int(month), int(day), int(hour), int(minute), int(second))
    except (TypeError, ValueError):
        return None
    return d.strftime("%Y-%m-%dT%H:%M:%S")

def normalize_date(value: Any) -> Optional[str]:
    """
    Converte as datas do Imoview para ISO 8601 (sem fuso).

    Aceita:
        - ISO já formatado ("2024-12-25T14:30:00"), devolvido como veio
        - ISO separado por espaço ("2024-12-25 14:30") ou só a data
        - "DD/MM/YYYY HH:mm", "DD/MM/YYYY HH:mm:ss" ou "DD/MM/YYYY"

    Returns:
        String ISO ou None se a entrada for vazia ou inválida
    """
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None

    if ISO_WITH_T.match(s):
        try:
            dtparser.isoparse(s)
        except (ValueError, OverflowError):
            return None
        return s

    m = ISO_WITH_SPACE.match(s)
    if m:
        y, mo, d, hh, mm, ss = m.groups()
        return _build(y, mo, d, hh or 0, mm or 0, ss or 0)

    parts = s.split(" ", 1)
    date_part = parts[0]
    time_part = parts[1].strip() if len(parts) > 1 else "00:00"

    dmy = date_part.split("/")
    if len(dmy) != 3:
        return None
    day, month, year = dmy
    # Ano com 4 dígitos evita interpretar "25/12/24" como ano 24
    if len(year) != 4:
        return None

    hms = time_part.split(":")
    if len(hms) < 2 or len(hms) > 3:
        return None
    hour, minute = hms[0] or "00", hms[1] or "00"
    second = hms[2] if len(hms) == 3 else "00"
    if not all(p.isdigit() for p in (day, month, year, hour, minute, second)):
        return None
    return _build(year, month, day, hour, minute, second)

def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Lê uma data ISO; datas com fuso são convertidas para o fuso local e perdem o tzinfo."""
    if not value:
        return None
    try:
        d = dtparser.isoparse(value)
    except (ValueError, OverflowError):
        return None
    if d.tzinfo is not None:
        d = d.astimezone(local_tz()).replace(tzinfo=None)
    return d
