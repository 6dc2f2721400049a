import httpx
import pytest
from fastapi.testclient import TestClient

from monitor_leads.api.deps import get_http_client
from monitor_leads.core.config import settings
from monitor_leads.main import app

class FakeImoview:
    """
    Imoview falso servido via httpx.MockTransport.

    atendimentos: finalidade -> payload (dict/list), status HTTP (int) ou exceção
    brutos: path -> payload / status / exceção (path ausente = 404)
    """
    def __init__(self):
        self.atendimentos = {1: [], 2: []}
        self.brutos = {}
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/Atendimento/RetornarAtendimentos":
            payload = self.atendimentos.get(int(request.url.params["finalidade"]), [])
        else:
            payload = self.brutos.get(request.url.path, 404)

        if isinstance(payload, Exception):
            raise payload
        if isinstance(payload, int):
            return httpx.Response(payload, text="erro do imoview")
        return httpx.Response(200, json=payload)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url="https://imoview.test",
            transport=httpx.MockTransport(self.handler),
        )

@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "IMOVIEW_API_KEY", "chave-teste")
    monkeypatch.setattr(settings, "TIMEZONE", "America/Sao_Paulo")
    monkeypatch.setattr(settings, "SLA_LIMITE_MINUTOS", 120)
    return "chave-teste"

@pytest.fixture
def imoview(api_key):
    fake = FakeImoview()

    async def _client():
        async with fake.client() as c:
            yield c

    app.dependency_overrides[get_http_client] = _client
    yield fake
    app.dependency_overrides.pop(get_http_client, None)

@pytest.fixture
def client():
    return TestClient(app)

def atendimento(codigo, entrada, **extra):
    """Registro de atendimento no formato do Imoview."""
    item = {
        "codigo": codigo,
        "lead": {"nome": f"Lead {codigo}", "telefone1": "11999999999", "email": f"lead{codigo}@example.com"},
        "situacao": "Novo",
        "unidadenome": "Equipe Sul",
        "datahoraentradalead": entrada,
        "midia": "Instagram",
    }
    item.update(extra)
    return item
