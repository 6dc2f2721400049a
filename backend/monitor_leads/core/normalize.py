import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from monitor_leads.core.dates import normalize_date, now_iso, parse_iso
from monitor_leads.models.lead import Lead

# Chaves onde o Imoview (e variações) costuma embrulhar a lista
LIST_KEYS = ("lista", "leads", "atendimentos", "items", "resultado", "data")

def extract_list(payload: Any) -> List[Dict[str, Any]]:
    """Acha a lista de registros num payload que pode ser array direto ou objeto com a lista dentro."""
    if not payload:
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in LIST_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []

def get_str(obj: Any, key: str) -> str:
    if not isinstance(obj, dict):
        return ""
    value = obj.get(key)
    return value if isinstance(value, str) else ""

def get_num_or_str(obj: Any, key: str) -> Optional[Union[str, int, float]]:
    if not isinstance(obj, dict):
        return None
    value = obj.get(key)
    # bool é subclasse de int, não serve como id
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        return value
    return None

def first_str(*values: str) -> str:
    """Primeira string não vazia da cadeia de fallback."""
    for v in values:
        if v:
            return v
    return ""

def first_date(*values: str) -> Optional[str]:
    for v in values:
        iso = normalize_date(v)
        if iso:
            return iso
    return None

def synthesize_id() -> str:
    # ids não são persistidos, então um valor aleatório basta
    return uuid.uuid4().hex

def normalize_attendance(item: Dict[str, Any], include_raw: bool = False) -> Lead:
    """
    Normaliza um registro de /Atendimento/RetornarAtendimentos.

    O lead vem aninhado em item["lead"]; os campos de topo servem de fallback.
    """
    lead_obj = item.get("lead") if isinstance(item.get("lead"), dict) else {}

    lead_id = get_num_or_str(item, "codigo")
    return Lead(
        id=lead_id if lead_id is not None else synthesize_id(),
        nome=first_str(get_str(lead_obj, "nome"), get_str(item, "nome")) or "Sem Nome",
        telefone=first_str(
            get_str(lead_obj, "telefone1"),
            get_str(lead_obj, "celular"),
            get_str(item, "telefone"),
            get_str(item, "phone"),
        ),
        email=first_str(get_str(lead_obj, "email"), get_str(item, "email")),
        status=get_str(item, "situacao") or "Novo",
        time=get_str(item, "unidadenome") or "Geral",
        data_entrada=first_date(
            get_str(item, "datahoraentradalead"),
            get_str(item, "data_entrada"),
        ) or now_iso(),
        primeira_interacao=first_date(
            get_str(item, "datahoraultimainteracao"),
            get_str(item, "primeira_interacao"),
        ),
        origem=get_str(item, "midia") or "Site",
        tem_atendimento=True,
        raw=item if include_raw else None,
    )

def normalize_raw_lead(item: Dict[str, Any], include_raw: bool = False) -> Lead:
    """Normaliza um lead "bruto" (endpoints de leads, sem atendimento associado)."""
    lead_id = get_num_or_str(item, "id")
    if lead_id is None:
        lead_id = get_num_or_str(item, "codigo")
    return Lead(
        id=lead_id if lead_id is not None else synthesize_id(),
        nome=first_str(get_str(item, "nome"), get_str(item, "lead_nome")) or "Sem Nome",
        telefone=first_str(
            get_str(item, "telefone1"),
            get_str(item, "celular"),
            get_str(item, "telefone"),
            get_str(item, "phone"),
        ),
        email=get_str(item, "email"),
        status=get_str(item, "status") or "Novo",
        time=first_str(get_str(item, "unidadenome"), get_str(item, "time")) or "Geral",
        data_entrada=first_date(
            get_str(item, "data_criacao"),
            get_str(item, "datahoraentradalead"),
        ) or now_iso(),
        primeira_interacao=None,
        origem=get_str(item, "origem") or "Site",
        tem_atendimento=False,
        raw=item if include_raw else None,
    )

def normalize_flat_lead(item: Dict[str, Any]) -> Lead:
    """
    Normaliza um lead já "achatado" (saída do proxy ou exportações antigas),
    aceitando os nomes em inglês que algumas integrações usam.
    """
    lead_id = get_num_or_str(item, "id")
    return Lead(
        id=lead_id if lead_id is not None else synthesize_id(),
        nome=first_str(get_str(item, "nome"), get_str(item, "name")) or "Sem Nome",
        telefone=first_str(
            get_str(item, "telefone"),
            get_str(item, "phone"),
            get_str(item, "celular"),
        ),
        email=get_str(item, "email"),
        status=get_str(item, "status") or "Novo",
        time=first_str(get_str(item, "time"), get_str(item, "team"), get_str(item, "fila")) or "Geral",
        data_entrada=first_date(
            get_str(item, "data_entrada"),
            get_str(item, "created_at"),
        ) or now_iso(),
        primeira_interacao=first_date(
            get_str(item, "primeira_interacao"),
            get_str(item, "first_interaction"),
        ),
        origem=get_str(item, "origem") or "Site",
        tem_atendimento=item.get("tem_atendimento") is True,
    )

def normalize_many(items: Iterable[Any], normalizer, **kwargs) -> List[Lead]:
    """Aplica o normalizador ignorando entradas que nem são objetos."""
    return [normalizer(item, **kwargs) for item in items if isinstance(item, dict)]

def sort_by_entry(leads: List[Lead]) -> List[Lead]:
    """Mais recentes primeiro."""
    return sorted(leads, key=lambda l: parse_iso(l.data_entrada) or datetime.min, reverse=True)
