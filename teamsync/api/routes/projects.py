# teamsync/api/routes/projects.py
from http import HTTPStatus
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from teamsync.api.dependencies.workspace import get_workspace
from teamsync.api.errors import domain_errors, to_response
from teamsync.schemas.base import Collection
from teamsync.schemas.mutation import MutationResponse
from teamsync.schemas.project import Project, ProjectStatus
from teamsync.services.workspace import Workspace

router = APIRouter(prefix="/projects", tags=["Projects"])

_PROJECT_EXAMPLE = {
    "id": "5b0c3a0e-3f1c-4f7e-9a59-0d6f0f6a2a11",
    "name": "Website Relaunch",
    "description": "New marketing site",
    "status": "In Progress",
    "assignees": ["3c1d..."],
    "dueDate": "2025-12-01",
    "priority": "High",
    "tags": ["web"],
    "completionDate": None,
}


@router.get(
    "",
    response_model=list[dict[str, Any]],
    summary="List projects",
    description="All projects in the store, optionally filtered by status or assignee.",
    responses={200: {"content": {"application/json": {"example": [_PROJECT_EXAMPLE]}}}},
)
async def list_projects(
    status: ProjectStatus | None = Query(default=None, description="Only projects in this column."),
    assignee: str | None = Query(default=None, description="Only projects assigned to this member id."),
    workspace: Workspace = Depends(get_workspace),
) -> list[dict[str, Any]]:
    projects = workspace.store.projects
    if status is not None:
        projects = [p for p in projects if p.status == status]
    if assignee is not None:
        projects = [p for p in projects if assignee in p.assignees]
    return [p.to_public() for p in projects]


@router.get(
    "/{project_id}",
    response_model=dict[str, Any],
    summary="Get a project by id",
    responses={404: {"description": "No project exists with the given id."}},
)
async def get_project(
    project_id: str = Path(..., description="Project id."),
    workspace: Workspace = Depends(get_workspace),
) -> dict[str, Any]:
    project = workspace.store.get(Collection.PROJECTS, project_id)
    if project is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"Project '{project_id}' not found.",
        )
    return project.to_public()


@router.post(
    "",
    response_model=MutationResponse,
    status_code=HTTPStatus.CREATED,
    summary="Create a project",
    description=(
        "Persists the project and adds it to the store. `createdAt`/`updatedAt` "
        "are stamped, `priority` defaults from the settings and a project "
        "created directly as Done gets its `completionDate`."
    ),
    responses={
        400: {"description": "A project with this id already exists."},
        502: {"description": "The persistence backend rejected the write; nothing changed."},
    },
)
async def create_project(
    payload: Project,
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.create_project(payload)
    return to_response(result, workspace)


@router.put(
    "/{project_id}",
    response_model=MutationResponse,
    summary="Replace a project",
    description=(
        "Full update. Moving the project into Done stamps `completionDate` "
        "and appends one `project_completed` activity; saving an already-Done "
        "project keeps its first stamp."
    ),
    responses={
        404: {"description": "Unknown project id."},
        502: {"description": "The persistence backend rejected the write; nothing changed."},
    },
)
async def update_project(
    payload: Project,
    project_id: str = Path(..., description="Project id."),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.update_project(payload.model_copy(update={"id": project_id}))
    return to_response(result, workspace)


@router.delete(
    "/{project_id}",
    response_model=MutationResponse,
    summary="Delete a project and its work logs",
    description=(
        "Deletes the project, then every work log booked on it. Work logs "
        "that could not be deleted stay in place and are reported as warnings."
    ),
    responses={
        404: {"description": "Unknown project id."},
        502: {"description": "The project itself could not be deleted."},
    },
)
async def delete_project(
    project_id: str = Path(..., description="Project id."),
    workspace: Workspace = Depends(get_workspace),
) -> MutationResponse:
    with domain_errors():
        result = await workspace.coordinator.delete_project(project_id)
    return to_response(result, workspace)
