from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..dependencies import get_label_repository
from ..errors import NotFoundError
from ..repositories import LabelRepository
from ..schemas import LabelCreate, LabelOut

router = APIRouter(
    prefix="/labels",
    tags=["labels"],
)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=LabelOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Label",
    responses={400: {"description": "Validation error"}},
)
def create_label(payload: LabelCreate, repo: LabelRepository = Depends(get_label_repository)) -> LabelOut:
    """
    Create a new Label.
    """
    return LabelOut(**repo.create(payload))


# PUBLIC_INTERFACE
@router.get("", response_model=List[LabelOut], summary="List Labels")
def all_labels(repo: LabelRepository = Depends(get_label_repository)) -> List[LabelOut]:
    return [LabelOut(**label) for label in repo.all()]


# PUBLIC_INTERFACE
@router.delete(
    "/{label_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete Label",
    responses={404: {"description": "Label not found"}},
)
def delete_label(label_id: int, repo: LabelRepository = Depends(get_label_repository)) -> Response:
    try:
        repo.delete(label_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Label not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
