"""Access to the per-application stores.

``create_app()`` attaches one KeyStore, AccessGate, JokeStore and
UserRegistry to ``app.state``; route handlers receive them through the
dependencies below.
"""

from starlette.requests import Request


def get_key_store(request: Request):
    return request.app.state.key_store


def get_access_gate(request: Request):
    return request.app.state.access_gate


def get_joke_store(request: Request):
    return request.app.state.joke_store


def get_user_registry(request: Request):
    return request.app.state.user_registry
