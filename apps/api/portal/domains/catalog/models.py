# apps/api/portal/domains/catalog/models.py
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, create_model, model_validator

from portal.shared.pagination import ListResponse, to_document

from .entities import SCOPE_FIELD, CatalogEntity


class CatalogItemResponse(BaseModel):
    """Response model for a catalog record; entity fields are carried as extras"""

    model_config = ConfigDict(extra="allow")

    id: str
    organisationId: str
    createdBy: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_prisma(cls, entity: CatalogEntity, record: Any) -> "CatalogItemResponse":
        document = to_document(record)
        return cls(
            id=document["id"],
            organisationId=document[SCOPE_FIELD],
            createdBy=document.get("createdBy"),
            createdAt=document.get("createdAt"),
            updatedAt=document.get("updatedAt"),
            **{name: document.get(name) for name in entity.field_names},
        )


CatalogListResponse = ListResponse[CatalogItemResponse]


class _CatalogCreateBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class _CatalogUpdateBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    @model_validator(mode="after")
    def validate_has_update(self) -> "_CatalogUpdateBase":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        if any(getattr(self, name) is None for name in self.model_fields_set):
            raise ValueError("Fields cannot be set to null")
        return self


def build_request_models(
    entity: CatalogEntity,
) -> Tuple[Type[BaseModel], Type[BaseModel]]:
    """Create the request body models (create, update) for a catalog entity."""
    create_fields: Dict[str, Any] = {}
    update_fields: Dict[str, Any] = {}
    for f in entity.fields:
        constraints = {"min_length": 1} if f.type is str else {}
        if f.required:
            create_fields[f.name] = (f.type, Field(..., **constraints))
        else:
            create_fields[f.name] = (f.type, Field(f.default, **constraints))
        update_fields[f.name] = (Optional[f.type], Field(None, **constraints))

    create = create_model(
        f"{entity.name}Create", __base__=_CatalogCreateBase, **create_fields
    )
    update = create_model(
        f"{entity.name}Update", __base__=_CatalogUpdateBase, **update_fields
    )
    return create, update
