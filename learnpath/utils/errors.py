"""
Domain errors raised by the services. The API layer maps them to HTTP
responses via `status_code`; services never raise HTTPException.
"""

from __future__ import annotations


class LearnPathError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(LearnPathError):
    status_code = 404

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidInputError(LearnPathError):
    status_code = 400


class ConflictError(LearnPathError):
    status_code = 409


class OrderConflictError(ConflictError):
    def __init__(self, scope: str, order_index: int):
        super().__init__(f"order_index {order_index} is already used in this {scope}")
        self.scope = scope
        self.order_index = order_index


class AccessDeniedError(LearnPathError):
    status_code = 403


class PersistenceError(LearnPathError):
    status_code = 503
