import httpx

from conftest import atendimento
from monitor_leads.core.config import settings

def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True

def test_proxy_leads_merges_purposes_newest_first(client, imoview):
    imoview.atendimentos[1] = {"lista": [atendimento(1, "01/02/2024 10:00", datahoraultimainteracao="01/02/2024 10:20")]}
    imoview.atendimentos[2] = [atendimento(2, "2024-02-03T08:00:00")]

    r = client.get("/api/proxy-leads")
    assert r.status_code == 200
    leads = r.json()["leads"]
    assert [l["id"] for l in leads] == [2, 1]
    assert leads[1]["primeira_interacao"] == "2024-02-01T10:20:00"
    assert "primeira_interacao" not in leads[0]
    assert all(l["tem_atendimento"] is True for l in leads)
    assert all("_raw" not in l for l in leads)

def test_proxy_leads_sends_key_and_page_params(client, imoview):
    client.get("/api/proxy-leads")
    assert len(imoview.requests) == 2
    finalidades = sorted(req.url.params["finalidade"] for req in imoview.requests)
    assert finalidades == ["1", "2"]
    for req in imoview.requests:
        assert req.headers["chave"] == "chave-teste"
        assert req.url.params["numeroPagina"] == "1"
        assert req.url.params["numeroRegistros"] == "20"
        assert req.url.params["situacao"] == "0"

def test_proxy_leads_raw_flag(client, imoview):
    item = atendimento(1, "01/02/2024 10:00")
    imoview.atendimentos[1] = [item]
    lead = client.get("/api/proxy-leads", params={"raw": "true"}).json()["leads"][0]
    assert lead["_raw"] == item

def test_failing_purpose_degrades_to_empty(client, imoview):
    imoview.atendimentos[1] = 503
    imoview.atendimentos[2] = [atendimento(2, "01/02/2024 10:00")]
    r = client.get("/api/proxy-leads")
    assert r.status_code == 200
    assert [l["id"] for l in r.json()["leads"]] == [2]

def test_network_error_degrades_to_empty(client, imoview):
    imoview.atendimentos[1] = httpx.ConnectError("fora do ar")
    imoview.atendimentos[2] = "não é json de lista"
    r = client.get("/api/proxy-leads")
    assert r.status_code == 200
    assert r.json() == {"leads": []}

def test_missing_api_key_is_500(client, imoview, monkeypatch):
    monkeypatch.setattr(settings, "IMOVIEW_API_KEY", None)
    for path in ("/api/proxy-leads", "/api/proxy-leads-all", "/api/dashboard", "/api/relatorios/csv"):
        r = client.get(path)
        assert r.status_code == 500
        assert r.json() == {"error": "API Key não configurada no servidor (IMOVIEW_API_KEY)"}
    assert imoview.requests == []

def test_proxy_leads_all_combines_raw_and_attendance(client, imoview):
    imoview.atendimentos[2] = {"atendimentos": [atendimento(10, "02/02/2024 09:00")]}
    imoview.brutos["/Lead/RetornarLeads"] = {"leads": []}
    imoview.brutos["/Leads/RetornarLeads"] = {
        "leads": [{"id": "b1", "nome": "Bruto", "celular": "11911112222", "data_criacao": "03/02/2024 12:00"}]
    }
    imoview.brutos["/Portal/RetornarLeads"] = {"leads": [{"id": "nunca"}]}

    r = client.get("/api/proxy-leads-all")
    assert r.status_code == 200
    leads = r.json()["leads"]
    assert [l["id"] for l in leads] == ["b1", 10]
    assert leads[0]["tem_atendimento"] is False
    assert leads[0]["telefone"] == "11911112222"
    assert leads[1]["tem_atendimento"] is True

    paths = [req.url.path for req in imoview.requests]
    assert "/Portal/RetornarLeads" not in paths
    pages = {req.url.params.get("numeroRegistros") for req in imoview.requests if req.url.path.startswith("/Atendimento")}
    assert pages == {"50"}

def test_dashboard_filters_by_team(client, imoview):
    imoview.atendimentos[1] = [
        atendimento(1, "01/02/2024 10:00", situacao="Visita agendada", datahoraultimainteracao="01/02/2024 10:10"),
        atendimento(2, "01/02/2024 11:00", unidadenome="Equipe Norte"),
        atendimento(3, "01/02/2024 14:00"),
    ]

    data = client.get("/api/dashboard", params={"time": "Equipe Sul"}).json()
    assert data["times"] == ["Todos", "Equipe Sul", "Equipe Norte"]
    assert data["kpis"]["totalLeads"] == 2
    assert data["kpis"]["agendamentos"] == 1
    assert data["kpis"]["pendentes"] == 1
    assert data["kpis"]["conversao"] == "50.0%"
    assert data["leadsPorHora"] == [{"hour": "10:00", "leads": 1}, {"hour": "14:00", "leads": 1}]
    assert {t["name"] for t in data["leadsPorTime"]} == {"Equipe Sul", "Equipe Norte"}
    assert [l["id"] for l in data["pendentes"]] == [3]
    assert data["leads"][0]["telefone_formatado"] == "(11) 99999-9999"
    assert set(data["leads"][0]["sla"]) == {"atrasado", "label", "status", "minutos"}

def test_dashboard_rejects_unknown_mode(client, imoview):
    assert client.get("/api/dashboard", params={"modo": "todos"}).status_code == 422

def test_relatorios_team_matrix(client, imoview):
    imoview.atendimentos[1] = [atendimento(1, "01/02/2024 10:00"), atendimento(2, "01/02/2024 11:00", unidadenome="Norte")]
    imoview.atendimentos[2] = [atendimento(3, "01/02/2024 12:00")]
    data = client.get("/api/relatorios").json()
    assert [(t["name"], t["total"]) for t in data["times"]] == [("Equipe Sul", 2), ("Norte", 1)]
    assert [l["id"] for l in data["leads"]] == [3, 2, 1]

def test_relatorios_csv_download(client, imoview):
    imoview.atendimentos[1] = [atendimento(1, "01/02/2024 10:00")]
    r = client.get("/api/relatorios/csv")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="relatorio_leads_' in r.headers["content-disposition"]
    lines = r.text.splitlines()
    assert lines[0].startswith('"ID","Data Entrada"')
    assert lines[1].startswith('1,"01/02/2024 10:00:00","Lead 1"')

def test_relatorios_whatsapp(client, imoview):
    data = client.get("/api/relatorios/whatsapp").json()
    assert "*Total Hoje:* 0 leads" in data["texto"]
    assert data["url"].startswith("https://wa.me/?text=")

def test_failing_raw_lead_endpoints_keep_attendance(client, imoview):
    imoview.atendimentos[1] = [atendimento(1, "01/02/2024 10:00")]
    imoview.brutos["/Lead/RetornarLeads"] = httpx.ConnectError("fora do ar")
    imoview.brutos["/Leads/RetornarLeads"] = 500
    imoview.brutos["/Portal/RetornarLeads"] = {"leads": "não é lista"}

    r = client.get("/api/proxy-leads-all")
    assert r.status_code == 200
    assert [l["id"] for l in r.json()["leads"]] == [1]
    paths = [req.url.path for req in imoview.requests]
    assert {"/Lead/RetornarLeads", "/Leads/RetornarLeads", "/Portal/RetornarLeads"} <= set(paths)

def test_unexpected_failure_is_500(client, imoview, monkeypatch):
    def _boom(leads):
        raise KeyError("data_entrada")

    monkeypatch.setattr("monitor_leads.core.imoview.sort_by_entry", _boom)
    for path in ("/api/proxy-leads", "/api/proxy-leads-all"):
        r = client.get(path)
        assert r.status_code == 500
        assert r.json() == {"error": "Falha interna ao conectar com a API"}
