# apps/api/portal/domains/catalog/service.py
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel

from portal.core.database import Database, is_object_id
from portal.shared.exceptions import (
    InvalidDataError,
    QueryValidationError,
    ResourceNotFoundError,
)
from portal.shared.pagination import QueryParameters, paginate, with_filters

from .entities import SCOPE_FIELD, CatalogEntity
from .models import CatalogItemResponse, CatalogListResponse

logger = logging.getLogger(__name__)

_BOOLEAN_VALUES = {"true": True, "false": False}


def parse_boolean_filters(
    entity: CatalogEntity, query: Mapping[str, str]
) -> Dict[str, Optional[bool]]:
    """
    Read the entity's boolean filters (e.g. ``isActive=true``) from a query string.

    Raises:
        QueryValidationError: If a value is not ``true`` or ``false``
    """
    filters: Dict[str, Optional[bool]] = {}
    for name in entity.boolean_filters:
        raw = query.get(name)
        if raw is None or raw == "":
            continue
        value = _BOOLEAN_VALUES.get(raw.lower())
        if value is None:
            raise QueryValidationError(f"{name} must be 'true' or 'false'")
        filters[name] = value
    return filters


class CatalogService:
    """List, create, read, update and delete for one catalog entity"""

    def __init__(self, db: Database, entity: CatalogEntity):
        self.db = db
        self.entity = entity

    @property
    def collection(self) -> Any:
        return getattr(self.db, self.entity.model)

    async def list_items(
        self,
        organization_id: str,
        params: QueryParameters,
        filters: Optional[Dict[str, Optional[bool]]] = None,
    ) -> CatalogListResponse:
        """
        Get one page of catalog records for an organisation.

        Search matches the entity's primary text field (``name`` or ``code``
        for branches and departments).
        """
        if filters:
            params = with_filters(params, **filters)
        result = await paginate(
            self.collection,
            params,
            self.entity.list_config,
            scope={SCOPE_FIELD: organization_id},
        )
        return CatalogListResponse(
            data=[
                CatalogItemResponse.from_prisma(self.entity, r) for r in result.items
            ],
            pagination=result.pagination,
        )

    async def get_item(self, organization_id: str, item_id: str) -> CatalogItemResponse:
        record = await self._get_record(organization_id, item_id)
        return CatalogItemResponse.from_prisma(self.entity, record)

    async def create_item(
        self, organization_id: str, user_id: str, data: BaseModel
    ) -> CatalogItemResponse:
        """
        Create a catalog record in the organisation.

        Raises:
            InvalidDataError: If the entity's unique field already holds the
                same value (ignoring case) in this organisation
        """
        values = data.model_dump()
        if self.entity.unique_field:
            await self._ensure_unique(organization_id, values[self.entity.unique_field])

        record = await self.collection.create(
            data={**values, SCOPE_FIELD: organization_id, "createdBy": user_id}
        )
        logger.info(
            f"Created {self.entity.name} {record.id} in organisation {organization_id}"
        )
        return CatalogItemResponse.from_prisma(self.entity, record)

    async def update_item(
        self, organization_id: str, item_id: str, updates: BaseModel
    ) -> CatalogItemResponse:
        await self._get_record(organization_id, item_id)
        changes = updates.model_dump(exclude_unset=True)
        unique_field = self.entity.unique_field
        if unique_field and unique_field in changes:
            await self._ensure_unique(
                organization_id, changes[unique_field], exclude_id=item_id
            )

        record = await self.collection.update(where={"id": item_id}, data=changes)
        return CatalogItemResponse.from_prisma(self.entity, record)

    async def delete_item(self, organization_id: str, item_id: str) -> None:
        await self._get_record(organization_id, item_id)
        await self.collection.delete(where={"id": item_id})
        logger.info(
            f"Deleted {self.entity.name} {item_id} from organisation {organization_id}"
        )

    async def _get_record(self, organization_id: str, item_id: str) -> Any:
        if not is_object_id(item_id):
            raise ResourceNotFoundError(f"{self.entity.name} not found")
        record = await self.collection.find_first(
            where={"id": item_id, SCOPE_FIELD: organization_id}
        )
        if not record:
            raise ResourceNotFoundError(f"{self.entity.name} not found")
        return record

    async def _ensure_unique(
        self, organization_id: str, value: str, exclude_id: Optional[str] = None
    ) -> None:
        where: Dict[str, Any] = {
            SCOPE_FIELD: organization_id,
            self.entity.unique_field: {"equals": value, "mode": "insensitive"},
        }
        if exclude_id:
            where["NOT"] = {"id": exclude_id}
        existing = await self.collection.find_first(where=where)
        if existing:
            raise InvalidDataError(f"{self.entity.name} '{value}' already exists")
