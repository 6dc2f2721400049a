#!/usr/bin/env python3
"""
Script para gerar o relatório de leads sem subir o backend.

Uso:
    # Busca no Imoview e salva o CSV:
    python gerar_relatorio.py --csv relatorio.csv

    # Resumo para WhatsApp a partir de um JSON salvo do /api/proxy-leads:
    python gerar_relatorio.py --arquivo leads.json --whatsapp

Requisitos:
    - IMOVIEW_API_KEY no .env (não precisa quando usar --arquivo)
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

# Adiciona o diretório do backend ao path
backend_dir = Path(__file__).parent.absolute()
sys.path.insert(0, str(backend_dir))

load_dotenv()

from monitor_leads.core.dates import now_local
from monitor_leads.core.export import csv_filename, leads_to_csv, whatsapp_link, whatsapp_summary
from monitor_leads.core.imoview import MissingApiKey, get_all_leads, get_attendance_leads, new_client
from monitor_leads.core.metrics import compute_kpis, team_stats
from monitor_leads.core.normalize import extract_list, normalize_flat_lead, normalize_many, sort_by_entry

def load_from_file(path: Path):
    data = json.loads(path.read_text(encoding="utf-8"))
    return sort_by_entry(normalize_many(extract_list(data), normalize_flat_lead))

async def load_from_api(modo: str):
    async with new_client() as client:
        if modo == "geral":
            return await get_all_leads(client)
        return await get_attendance_leads(client)

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Relatório de leads do Imoview")
    parser.add_argument("--modo", choices=["atendimentos", "geral"], default="atendimentos")
    parser.add_argument("--arquivo", type=Path, help="JSON com leads já exportados (em vez de chamar a API)")
    parser.add_argument("--csv", nargs="?", const="", default=None, help="Salva o CSV (sem caminho: nome padrão)")
    parser.add_argument("--whatsapp", action="store_true", help="Imprime o resumo e o link wa.me")
    args = parser.parse_args(argv)

    if args.arquivo:
        try:
            leads = load_from_file(args.arquivo)
        except (OSError, ValueError) as e:
            print(f"❌ Erro ao ler {args.arquivo}: {type(e).__name__}: {e}")
            return 1
    else:
        try:
            leads = asyncio.run(load_from_api(args.modo))
        except MissingApiKey:
            print("❌ IMOVIEW_API_KEY não configurada no .env")
            print("   Adicione: IMOVIEW_API_KEY=sua_chave")
            return 1

    now = now_local()
    kpis = compute_kpis(leads)
    print(f"\n📊 {kpis['totalLeads']} leads | {kpis['agendamentos']} visitas | "
          f"{kpis['pendentes']} pendentes | conversão {kpis['conversao']}\n")
    for stat in team_stats(leads, now=now):
        print(f"   {stat['name']}: {stat['total']} leads, {stat['slasCritical']} SLA crítico, eficiência {stat['efficiency']}")

    if args.csv is not None:
        out = Path(args.csv or csv_filename(now))
        out.write_text(leads_to_csv(leads, now=now), encoding="utf-8")
        print(f"\n✅ CSV salvo em {out}")

    if args.whatsapp:
        texto = whatsapp_summary(leads, now=now)
        print("\n" + texto)
        print(f"\n🔗 {whatsapp_link(texto)}")

    return 0

if __name__ == "__main__":
    sys.exit(main())
