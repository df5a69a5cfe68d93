from typing import Annotated, cast

from fastapi import Depends, Request

from engagement_artifacts.service import ArtifactServices


def get_services(request: Request) -> ArtifactServices:
    return cast("ArtifactServices", request.app.state.services)


Services = Annotated[ArtifactServices, Depends(get_services)]
