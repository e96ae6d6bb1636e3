"""
Services module for the Video Link Resolver backend.

- resolver_service: sequential orchestrator that turns share text into a
  canonical content item
- strategies: the individual resolution strategies (Douyin share page,
  Douyin item API, third-party parsing APIs) and their registry

Services are request-scoped and receive their HTTP client through FastAPI's
dependency system.
"""
