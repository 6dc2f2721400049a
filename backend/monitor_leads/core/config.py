import os
from dotenv import load_dotenv
load_dotenv()

def _as_int(name: str, default: int) -> int:
    try:
        return int(str(os.getenv(name, default)).strip())
    except ValueError:
        return default

def _as_float(name: str, default: float) -> float:
    try:
        return float(str(os.getenv(name, default)).strip())
    except ValueError:
        return default

class Settings:
    # Imoview
    IMOVIEW_API_KEY: str | None = os.getenv("IMOVIEW_API_KEY")
    IMOVIEW_BASE_URL: str = os.getenv("IMOVIEW_BASE_URL", "https://api.imoview.com.br").rstrip("/")
    IMOVIEW_TIMEOUT: float = _as_float("IMOVIEW_TIMEOUT", 15.0)

    # A API documenta no máximo 20 registros por página
    ATENDIMENTOS_POR_PAGINA: int = _as_int("ATENDIMENTOS_POR_PAGINA", 20)
    ATENDIMENTOS_POR_PAGINA_GERAL: int = _as_int("ATENDIMENTOS_POR_PAGINA_GERAL", 50)

    # SLA / relatórios
    SLA_LIMITE_MINUTOS: int = _as_int("SLA_LIMITE_MINUTOS", 120)
    TIMEZONE: str = os.getenv("TIMEZONE", "America/Sao_Paulo")

    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()] or ["*"]

settings = Settings()
