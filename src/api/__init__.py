"""FastAPI routes and endpoints.

Endpoints:
- GET /, GET /health: Liveness and health status
- GET /presenters, /programs, /broadcasts, /songs (and sub-routes): dialog
  routes answering the dialog engine with the next dialog state

Patterns applied:
- Dependency injection for the backend client
- Statelessness principle for horizontal scaling
"""
