from typing import List

from fastapi import APIRouter, Depends, HTTPException

from provisioning_engine.api.dependencies import (
    get_creation_service,
    get_server_repository,
    get_startup_service,
)
from provisioning_engine.api.schemas.server import (
    ServerCreateRequest,
    ServerResponse,
    StartupVariableResponse,
    StartupVariableUpdate,
)
from provisioning_engine.core.errors import (
    AgentConnectionError,
    InvalidArgument,
    PersistenceError,
    PreconditionError,
    ServerNotFound,
    ValidationError,
)
from provisioning_engine.services.startup import select_options

router = APIRouter(prefix="/servers", tags=["servers"])


def _raise_http(e: Exception):
    if isinstance(e, ValidationError):
        raise HTTPException(
            status_code=422,
            detail={"field": e.field, "message": e.message, "errors": e.errors},
        ) from e
    if isinstance(e, ServerNotFound):
        raise HTTPException(status_code=404, detail=str(e)) from e
    if isinstance(e, (PreconditionError, InvalidArgument)):
        raise HTTPException(status_code=400, detail=str(e)) from e
    if isinstance(e, AgentConnectionError):
        raise HTTPException(status_code=502, detail=str(e)) from e
    if isinstance(e, PersistenceError):
        raise HTTPException(status_code=503, detail=str(e)) from e
    raise e


@router.post("", response_model=ServerResponse, status_code=201)
def create_server(
    request: ServerCreateRequest,
    service=Depends(get_creation_service),
):
    data = request.model_dump(exclude={"egg_id", "node_id", "validate_variables"})

    try:
        server = service.provision(
            data,
            egg_id=request.egg_id,
            node_id=request.node_id,
            validate_variables=request.validate_variables,
        )
    except Exception as e:
        _raise_http(e)

    return ServerResponse.from_server(server)


@router.get("/{server_uuid}", response_model=ServerResponse)
def get_server(
    server_uuid: str,
    repository=Depends(get_server_repository),
):
    server = repository.get(server_uuid)

    if not server:
        raise HTTPException(status_code=404, detail="Server not found")

    return ServerResponse.from_server(server)


@router.get("/{server_uuid}/startup", response_model=List[StartupVariableResponse])
def list_startup_variables(
    server_uuid: str,
    service=Depends(get_startup_service),
):
    try:
        variables = service.list_variables(server_uuid)
    except Exception as e:
        _raise_http(e)

    return [
        StartupVariableResponse(
            env_variable=variable.env_variable,
            name=variable.name,
            value=value,
            rules=variable.rules,
            is_editable=service.is_editable(variable),
            options=select_options(variable),
        )
        for variable, value in variables
    ]


@router.put("/{server_uuid}/startup/variable")
def update_startup_variable(
    server_uuid: str,
    request: StartupVariableUpdate,
    service=Depends(get_startup_service),
):
    try:
        updated = service.update(server_uuid, request.key, request.value)
    except Exception as e:
        _raise_http(e)

    return {"key": request.key, "value": updated.variable_value}
