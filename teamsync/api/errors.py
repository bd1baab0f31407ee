# teamsync/api/errors.py
from contextlib import contextmanager
from http import HTTPStatus
from typing import Iterator

from fastapi import HTTPException

from teamsync.schemas.mutation import MutationResponse
from teamsync.services.coordinator import MutationResult
from teamsync.services.csv_import import ImportRejected
from teamsync.services.workspace import Workspace


@contextmanager
def domain_errors() -> Iterator[None]:
    """
    Translate service-level exceptions into HTTP errors.

    - LookupError     -> 404
    - ImportRejected  -> 400 with the row reasons
    - ValueError      -> 400
    - PermissionError -> 403
    """
    try:
        yield
    except LookupError as exc:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc)) from exc
    except ImportRejected as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail={
                "message": f"Import of {exc.collection.value} failed.",
                "errors": exc.reasons,
            },
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(exc)) from exc
    except PermissionError as exc:
        raise HTTPException(status_code=HTTPStatus.FORBIDDEN, detail=str(exc)) from exc


def to_response(result: MutationResult, workspace: Workspace) -> MutationResponse:
    """
    Map a coordinator result to the response body, or raise 502 when the
    persistence backend refused the write.
    """
    if not result.ok:
        raise HTTPException(
            status_code=HTTPStatus.BAD_GATEWAY,
            detail={
                "message": result.message,
                "entity": result.entity,
                "reconciled": result.reconciled,
            },
        )

    data = result.value
    if isinstance(data, list):
        data = [item.to_public() if hasattr(item, "to_public") else item for item in data]
    elif hasattr(data, "to_public"):
        data = data.to_public()

    snapshot = workspace.snapshot
    return MutationResponse(
        entity=result.entity,
        data=data,
        warnings=result.warnings,
        revision=snapshot.revision if snapshot else None,
    )
