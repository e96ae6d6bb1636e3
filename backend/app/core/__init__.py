"""
Core infrastructure for the Video Link Resolver backend.

- http_client: request-scoped httpx.AsyncClient construction and the FastAPI
  dependency that hands a client factory to routes
"""
