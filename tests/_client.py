from httpx import ASGITransport, AsyncClient

from educrm.main import app


def get_async_client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
