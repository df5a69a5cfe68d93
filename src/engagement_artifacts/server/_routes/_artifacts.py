"""Artifact read and write endpoints."""

from typing import Annotated

from fastapi import APIRouter, Body, Path, Query, Response, status
from fastapi.responses import JSONResponse

from engagement_artifacts.artifacts import Artifact, ArtifactCount
from engagement_artifacts.server._routes._deps import Services
from engagement_artifacts.server._schemas import BulkUpdateResponse, RefreshResponse
from engagement_artifacts.service import FilterOptions, ListOptions

router = APIRouter(prefix="/artifacts", tags=["artifacts"])

EngagementQuery = Annotated[str | None, Query(alias="engagementUuid")]
TypeQuery = Annotated[str | None, Query()]
RegionQuery = Annotated[list[str] | None, Query()]
RegionsQuery = Annotated[list[str] | None, Query(alias="regions")]
AuthorEmail = Annotated[str | None, Query(alias="authorEmail")]
AuthorName = Annotated[str | None, Query(alias="authorName")]
ArtifactsBody = Annotated[list[Artifact], Body()]


# =============================================================================
# Reads
# =============================================================================


@router.get("", response_model=list[Artifact], response_model_exclude_none=True)
async def get_artifacts(  # noqa: PLR0913
    services: Services,
    response: Response,
    engagement_uuid: EngagementQuery = None,
    type: TypeQuery = None,  # noqa: A002
    region: RegionQuery = None,
    page: Annotated[int, Query()] = 0,
    page_size: Annotated[int, Query(alias="pageSize")] = 0,
    sort: Annotated[str | None, Query()] = None,
) -> list[Artifact]:
    options = ListOptions(
        engagement_uuid=engagement_uuid,
        type=type,
        regions=tuple(region or ()),
        page=page,
        page_size=page_size,
        sort=sort,
    )
    artifacts = await services.query.get_artifacts(options)
    total = await services.query.count_artifacts(options)

    page_size_used = options.effective_page_size(services.query.default_page_size)
    response.headers["x-page"] = str(options.effective_page)
    response.headers["x-per-page"] = str(page_size_used)
    response.headers["x-total-artifacts"] = str(total.count)
    response.headers["x-total-pages"] = str(total.count // page_size_used + 1)
    return artifacts


@router.get("/count", response_model_exclude_none=True)
async def count_artifacts(
    services: Services,
    engagement_uuid: EngagementQuery = None,
    type: TypeQuery = None,  # noqa: A002
    region: RegionQuery = None,
) -> ArtifactCount:
    options = FilterOptions(
        engagement_uuid=engagement_uuid, type=type, regions=tuple(region or ())
    )
    return await services.query.count_artifacts(options)


@router.get("/types")
async def get_types(services: Services, regions: RegionsQuery = None) -> list[str]:
    return await services.query.get_types(tuple(regions or ()))


@router.get("/types/count")
async def get_type_counts(
    services: Services, regions: RegionsQuery = None
) -> list[ArtifactCount]:
    return await services.query.get_type_summary(tuple(regions or ()))


@router.get("/engagements/count")
async def get_engagement_counts(services: Services) -> dict[str, int]:
    return await services.query.get_engagement_counts()


# =============================================================================
# Writes
# =============================================================================


@router.put(
    "/engagement/{engagementUuid}/{region}",
    response_model=list[Artifact],
    response_model_exclude_none=True,
)
async def update_engagement_artifacts(  # noqa: PLR0913
    services: Services,
    artifacts: ArtifactsBody,
    engagement_uuid: Annotated[str, Path(alias="engagementUuid")],
    region: Annotated[str, Path()],
    author_email: AuthorEmail = None,
    author_name: AuthorName = None,
) -> list[Artifact]:
    return await services.engine.update_engagement(
        engagement_uuid,
        artifacts,
        region=region,
        author_email=author_email,
        author_name=author_name,
    )


@router.put("", response_model=BulkUpdateResponse)
async def update_artifacts(
    services: Services,
    artifacts: ArtifactsBody,
    author_email: AuthorEmail = None,
    author_name: AuthorName = None,
) -> JSONResponse:
    result = await services.engine.update_bulk(
        artifacts, author_email=author_email, author_name=author_name
    )
    body = BulkUpdateResponse(engagements=result.engagements, failed=result.failed)
    return JSONResponse(
        status_code=status.HTTP_200_OK if result.succeeded else status.HTTP_502_BAD_GATEWAY,
        content=body.model_dump(),
    )


@router.put("/refresh", status_code=status.HTTP_202_ACCEPTED)
async def refresh_artifacts(services: Services, response: Response) -> RefreshResponse:
    result = await services.refresh.rebuild()
    response.headers["x-total-artifacts"] = str(result.total)
    return RefreshResponse(total=result.total, failed=result.failed)
