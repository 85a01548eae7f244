"""Task creation and status endpoints for browser clients."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, Request, status
from pydantic import BaseModel, ConfigDict, Field

from ..client import TaskClient
from .schemas import AnyTaskRequest

router = APIRouter(prefix="/api/3d", tags=["Tasks"])


class TaskCreatedResponse(BaseModel):
    """Identifier returned after a task was accepted by the vendor."""

    model_config = ConfigDict(populate_by_name=True)

    task_id: str = Field(alias="taskId")


def get_task_client(request: Request) -> TaskClient:
    """Return the :class:`TaskClient` stored on the application state."""

    return request.app.state.task_client


@router.post(
    "/task",
    response_model=TaskCreatedResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
)
async def create_task(
    client: Annotated[TaskClient, Depends(get_task_client)],
    payload: Annotated[AnyTaskRequest, Body(discriminator="type")],
) -> TaskCreatedResponse:
    task_id = await client.create_task(payload.to_params())
    return TaskCreatedResponse(task_id=task_id)


@router.get("/task/{task_id}", status_code=status.HTTP_200_OK)
async def get_task(
    client: Annotated[TaskClient, Depends(get_task_client)],
    task_id: Annotated[str, Path(min_length=1)],
) -> dict[str, Any]:
    task = await client.get_task(task_id)
    return task.to_dict()


__all__ = ["router", "get_task_client", "TaskCreatedResponse"]
