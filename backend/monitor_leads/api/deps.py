from typing import AsyncIterator

import httpx

from monitor_leads.core.imoview import new_client

async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Um cliente por requisição, compartilhado pelas buscas paralelas."""
    async with new_client() as client:
        yield client
