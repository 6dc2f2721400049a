"""
FastAPI app do monitor de leads (serverless function no Vercel)
"""
import sys
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

def _error_app(message: str, error_type: str) -> FastAPI:
    """App mínimo que responde 500 em qualquer rota quando a inicialização falha."""
    error_app = FastAPI(title="Monitor de Leads API - Error Mode")

    @error_app.get("/")
    @error_app.get("/{path:path}")
    async def error_handler(request: Request, path: str = ""):
        return JSONResponse(
            status_code=500,
            content={
                "error": message,
                "type": error_type,
                "path": str(request.url.path),
            },
        )

    return error_app

def create_app() -> FastAPI:
    try:
        from fastapi.middleware.cors import CORSMiddleware
        from monitor_leads.api import health, leads, reports
        from monitor_leads.api.leads import ProxyError, proxy_error_handler
        from monitor_leads.core.config import settings
    except Exception as e:
        import_error = f"Import error: {type(e).__name__}: {e}"
        print(f"[MAIN] ❌ Erro ao importar módulos: {import_error}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        return _error_app(import_error, "InitializationError")

    app = FastAPI(title="Monitor de Leads API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ProxyError, proxy_error_handler)

    app.include_router(health.router, tags=["health"])
    app.include_router(leads.router, prefix="/api", tags=["leads"])
    app.include_router(reports.router, prefix="/api", tags=["relatorios"])
    print("[MAIN] ✅ Routers registrados com sucesso", file=sys.stderr)

    if not settings.IMOVIEW_API_KEY:
        print("[MAIN] ⚠️ IMOVIEW_API_KEY não configurada; o proxy vai responder 500", file=sys.stderr)

    return app

app = create_app()
