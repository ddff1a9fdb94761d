# apps/api/portal/domains/catalog/routes.py
from fastapi import APIRouter, Depends, Request, Response, status

from portal.core.database import Database, get_db
from portal.domains.auth.dependencies import get_current_user_id
from portal.domains.catalog.entities import CATALOG_ENTITIES, CatalogEntity
from portal.domains.catalog.models import (
    CatalogItemResponse,
    CatalogListResponse,
    build_request_models,
)
from portal.domains.catalog.service import CatalogService, parse_boolean_filters
from portal.shared.pagination import QueryParameters, get_query_parameters
from portal.shared.permissions import (
    MemberContext,
    Permission,
    get_member_context,
    require_permission,
)

router = APIRouter(prefix="/catalog", tags=["Catalog"])


def register_catalog_routes(router: APIRouter, entity: CatalogEntity) -> None:
    """
    Add list, create, get, update and delete routes for one catalog entity.

    Any member of the organisation can read. Writing requires EDIT_ORGANISATION.
    """
    create_model, update_model = build_request_models(entity)
    path = f"/{{org_id}}/{entity.slug}"
    tags = [f"Catalog: {entity.plural}"]

    @router.get(
        path,
        response_model=CatalogListResponse,
        operation_id=f"get{entity.plural}",
        tags=tags,
        summary=f"List {entity.plural}",
    )
    async def list_items(
        org_id: str,
        request: Request,
        params: QueryParameters = Depends(get_query_parameters),
        context: MemberContext = Depends(get_member_context),
        db: Database = Depends(get_db),
    ) -> CatalogListResponse:
        filters = parse_boolean_filters(entity, request.query_params)
        return await CatalogService(db, entity).list_items(org_id, params, filters)

    @router.post(
        path,
        response_model=CatalogItemResponse,
        status_code=status.HTTP_201_CREATED,
        operation_id=f"create{entity.name}",
        tags=tags,
        summary=f"Create {entity.name}",
    )
    async def create_item(
        org_id: str,
        data: create_model,  # type: ignore[valid-type]
        context: MemberContext = Depends(
            require_permission(Permission.EDIT_ORGANISATION)
        ),
        user_id: str = Depends(get_current_user_id),
        db: Database = Depends(get_db),
    ) -> CatalogItemResponse:
        return await CatalogService(db, entity).create_item(org_id, user_id, data)

    @router.get(
        f"{path}/{{item_id}}",
        response_model=CatalogItemResponse,
        operation_id=f"get{entity.name}",
        tags=tags,
        summary=f"Get {entity.name}",
    )
    async def get_item(
        org_id: str,
        item_id: str,
        context: MemberContext = Depends(get_member_context),
        db: Database = Depends(get_db),
    ) -> CatalogItemResponse:
        return await CatalogService(db, entity).get_item(org_id, item_id)

    @router.patch(
        f"{path}/{{item_id}}",
        response_model=CatalogItemResponse,
        operation_id=f"update{entity.name}",
        tags=tags,
        summary=f"Update {entity.name}",
    )
    async def update_item(
        org_id: str,
        item_id: str,
        updates: update_model,  # type: ignore[valid-type]
        context: MemberContext = Depends(
            require_permission(Permission.EDIT_ORGANISATION)
        ),
        db: Database = Depends(get_db),
    ) -> CatalogItemResponse:
        return await CatalogService(db, entity).update_item(org_id, item_id, updates)

    @router.delete(
        f"{path}/{{item_id}}",
        status_code=status.HTTP_204_NO_CONTENT,
        operation_id=f"delete{entity.name}",
        tags=tags,
        summary=f"Delete {entity.name}",
    )
    async def delete_item(
        org_id: str,
        item_id: str,
        context: MemberContext = Depends(
            require_permission(Permission.EDIT_ORGANISATION)
        ),
        db: Database = Depends(get_db),
    ) -> Response:
        await CatalogService(db, entity).delete_item(org_id, item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


for _entity in CATALOG_ENTITIES.values():
    register_catalog_routes(router, _entity)
