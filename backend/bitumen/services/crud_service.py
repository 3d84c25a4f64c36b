# Overview: Service-layer operations for every registered resource; permission-gated list/get/create/update/delete.

"""
Generic Entity CRUD Service

One EntityService per ResourceSpec. Every public method checks the
caller's grant on the resource's module before touching the database, so a
denied call never reads, validates or writes anything.

Gating:
- list/get  -> VIEW
- create    -> ADD
- update    -> EDIT
- delete    -> DELETE

The apply_* methods carry no permission check; the sync relay uses them
to write records on behalf of the accounting agent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..permissions import Action
from ..validation import ConflictError, NotFoundError, ValidationError, coerce_filter_value, validate_payload
from .permission_service import require_permission
from .resources import RESOURCES, ResourceSpec


DEFAULT_LIMIT = 100
MAX_LIMIT = 500


@dataclass
class ListFilters:
    """
    equals: field -> value for equality filters (only the resource's filter_fields apply)
    search: free text matched case-insensitively against search_fields
    """
    equals: dict[str, Any]
    search: str | None = None
    include_inactive: bool = False
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    @classmethod
    def from_args(cls, spec: ResourceSpec, args) -> "ListFilters":
        """Build filters from request.args (a MultiDict) or a plain dict."""
        try:
            limit = int(args.get("limit", DEFAULT_LIMIT))
        except (TypeError, ValueError):
            limit = DEFAULT_LIMIT
        try:
            offset = int(args.get("offset", 0))
        except (TypeError, ValueError):
            offset = 0

        limit = max(1, min(limit, MAX_LIMIT))
        offset = max(0, offset)

        include_inactive = str(args.get("include_inactive", "false")).lower() in {"1", "true", "yes"}
        equals = {
            name: args.get(name)
            for name in spec.filter_fields
            if args.get(name) not in (None, "")
        }
        return cls(
            equals=equals,
            search=(args.get("search") or "").strip() or None,
            include_inactive=include_inactive,
            limit=limit,
            offset=offset,
        )


class EntityService:
    def __init__(self, spec: ResourceSpec):
        self.spec = spec

    @property
    def model(self):
        return self.spec.model

    # ------------------------------------------------------------------
    # Gated operations
    # ------------------------------------------------------------------

    def list_page(self, user: User, filters: ListFilters | None = None) -> tuple[list, int]:
        """Returns (rows, total matching before paging)."""
        require_permission(user, self.spec.module, Action.VIEW)
        filters = filters or ListFilters(equals={})

        query = self._filtered_query(filters)
        total = query.count()
        rows = (
            query.order_by(self.model.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
            .all()
        )
        return rows, total

    def list(self, user: User, filters: ListFilters | None = None) -> list:
        rows, _ = self.list_page(user, filters)
        return rows

    def get(self, user: User, entity_id: int):
        require_permission(user, self.spec.module, Action.VIEW)
        return self._get_or_404(entity_id)

    def create(self, user: User, payload: dict):
        require_permission(user, self.spec.module, Action.ADD)
        return self.apply_create(payload)

    def update(self, user: User, entity_id: int, partial: dict):
        require_permission(user, self.spec.module, Action.EDIT)
        entity = self._get_or_404(entity_id)
        return self.apply_update(entity, partial)

    def delete(self, user: User, entity_id: int) -> None:
        require_permission(user, self.spec.module, Action.DELETE)
        entity = self._get_or_404(entity_id)

        if self.spec.hard_delete:
            db.session.delete(entity)
        else:
            if self.spec.active_flag:
                entity.is_active = False
            if self.spec.cancel_status:
                entity.status = self.spec.cancel_status
        self._commit()

    # ------------------------------------------------------------------
    # Ungated writes
    # ------------------------------------------------------------------

    def apply_create(self, payload: dict):
        patch = validate_payload(
            model=self.model,
            payload=payload,
            policy=self.spec.policy,
            partial=False,
        )
        entity = self.model(**patch)
        if self.spec.rules:
            self.spec.rules(entity)
        db.session.add(entity)
        self._commit()
        return entity

    def apply_update(self, entity, partial: dict):
        patch = validate_payload(
            model=self.model,
            payload=partial,
            policy=self.spec.policy,
            partial=True,
        )
        for key, value in patch.items():
            setattr(entity, key, value)
        if self.spec.rules:
            try:
                self.spec.rules(entity)
            except ValidationError:
                db.session.rollback()
                raise
        self._commit()
        return entity

    def find_by(self, **criteria):
        return db.session.query(self.model).filter_by(**criteria).first()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_or_404(self, entity_id: int):
        entity = db.session.get(self.model, entity_id)
        if entity is None:
            raise NotFoundError(self.spec.label)
        return entity

    def _filtered_query(self, filters: ListFilters):
        model = self.model
        query = db.session.query(model)

        if not filters.include_inactive:
            if self.spec.active_flag:
                query = query.filter(model.is_active.is_(True))
            if self.spec.cancel_status:
                query = query.filter(model.status != self.spec.cancel_status)

        for name, raw in filters.equals.items():
            value = coerce_filter_value(model, name, raw)
            if name in self.spec.policy.choices and isinstance(value, str):
                value = value.upper()
            query = query.filter(getattr(model, name) == value)

        if filters.search and self.spec.search_fields:
            pattern = f"%{filters.search}%"
            query = query.filter(db.or_(*[
                getattr(model, name).ilike(pattern) for name in self.spec.search_fields
            ]))

        return query

    def _commit(self) -> None:
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise ConflictError(f"{self.spec.label} conflicts with an existing record") from exc


_SERVICES: dict[str, EntityService] = {name: EntityService(spec) for name, spec in RESOURCES.items()}


def service_for(name: str) -> EntityService:
    """Raises KeyError for unknown resource slugs."""
    return _SERVICES[name]
