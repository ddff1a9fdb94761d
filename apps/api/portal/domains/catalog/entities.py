"""
Registry of organisation lookup lists (HRMS and applicant tracking settings).

Every entity is a small per-organisation collection with one primary text
field. They share the same list, create, read, update and delete behaviour
and differ only in the fields, ordering and filters declared here.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from portal.shared.exceptions import ResourceNotFoundError
from portal.shared.pagination import ListQueryConfig, SortOrder

# Field holding the owning organisation on every catalog record
SCOPE_FIELD = "organisationId"


@dataclass(frozen=True)
class CatalogField:
    name: str
    type: type
    required: bool = True
    default: Any = None


@dataclass(frozen=True)
class CatalogEntity:
    """
    Attributes:
        slug: URL segment under ``/catalog/{org_id}/``
        model: Prisma client attribute, e.g. ``"jobtype"`` for ``db.jobtype``
        name: Singular display name, also used in operation ids
        plural: Plural display name, used in operation ids
        fields: Writable fields
        list_config: Search, ordering and filter policy for list queries
        boolean_filters: Query parameters accepted as ``true``/``false`` filters
        unique_field: Field that must be unique per organisation, ignoring case
    """

    slug: str
    model: str
    name: str
    plural: str
    fields: Tuple[CatalogField, ...]
    list_config: ListQueryConfig
    boolean_filters: Tuple[str, ...] = ()
    unique_field: Optional[str] = None

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)


def _single_field(
    slug: str, model: str, name: str, plural: str, field: str, **kwargs: Any
) -> CatalogEntity:
    return CatalogEntity(
        slug=slug,
        model=model,
        name=name,
        plural=plural,
        fields=(CatalogField(field, str),),
        list_config=ListQueryConfig(
            search_fields=(field,),
            sortable_fields=frozenset({field, "createdAt", "updatedAt"}),
            filterable_fields=frozenset(),
        ),
        **kwargs,
    )


def _coded(slug: str, model: str, name: str, plural: str) -> CatalogEntity:
    return CatalogEntity(
        slug=slug,
        model=model,
        name=name,
        plural=plural,
        fields=(
            CatalogField("name", str),
            CatalogField("code", str),
            CatalogField("isActive", bool, required=False, default=True),
        ),
        list_config=ListQueryConfig(
            search_fields=("name", "code"),
            sortable_fields=frozenset({"name", "code", "createdAt", "updatedAt"}),
            filterable_fields=frozenset({"isActive"}),
        ),
        boolean_filters=("isActive",),
    )


CATALOG_ENTITIES: Dict[str, CatalogEntity] = {
    entity.slug: entity
    for entity in (
        _single_field("industries", "industry", "Industry", "Industries", "industry"),
        _single_field("job-types", "jobtype", "JobType", "JobTypes", "type"),
        CatalogEntity(
            slug="salaries",
            model="salary",
            name="Salary",
            plural="Salaries",
            fields=(CatalogField("salary", str),),
            list_config=ListQueryConfig(
                search_fields=("salary",),
                default_sort=(("salary", SortOrder.ASC), ("createdAt", SortOrder.DESC)),
                sortable_fields=frozenset({"salary", "createdAt", "updatedAt"}),
                filterable_fields=frozenset(),
            ),
        ),
        _single_field(
            "work-experiences",
            "workexperience",
            "WorkExperience",
            "WorkExperiences",
            "experience",
        ),
        _single_field(
            "job-opening-statuses",
            "jobopeningstatus",
            "JobOpeningStatus",
            "JobOpeningStatuses",
            "status",
        ),
        _single_field(
            "employment-statuses",
            "employmentstatus",
            "EmploymentStatus",
            "EmploymentStatuses",
            "status",
        ),
        CatalogEntity(
            slug="designations",
            model="designation",
            name="Designation",
            plural="Designations",
            fields=(
                CatalogField("name", str),
                CatalogField("level", int),
                CatalogField("isActive", bool, required=False, default=True),
            ),
            list_config=ListQueryConfig(
                search_fields=("name",),
                default_sort=(("level", SortOrder.ASC), ("createdAt", SortOrder.DESC)),
                sortable_fields=frozenset({"name", "level", "createdAt", "updatedAt"}),
                filterable_fields=frozenset({"isActive"}),
            ),
            boolean_filters=("isActive",),
        ),
        _coded("branches", "branch", "Branch", "Branches"),
        _coded("departments", "department", "Department", "Departments"),
        _single_field(
            "hiring-sources",
            "hiringsource",
            "HiringSource",
            "HiringSources",
            "source",
            unique_field="source",
        ),
    )
}


def get_catalog_entity(slug: str) -> CatalogEntity:
    entity = CATALOG_ENTITIES.get(slug)
    if entity is None:
        raise ResourceNotFoundError(f"Unknown catalog '{slug}'")
    return entity
