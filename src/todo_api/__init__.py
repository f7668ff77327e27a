"""
Todo API package.

The ASGI application lives in `todo_api.main` (`todo_api.main:app`); build a
custom one with `todo_api.main.create_app`.
"""
