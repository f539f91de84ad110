from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from empowerlink.api.deps import get_current_principal, get_optional_principal, get_storage, get_workflow
from empowerlink.gateways.identity import Principal
from empowerlink.models.verification import DocumentType
from empowerlink.schemas.verification import VerificationDecision, VerificationRead
from empowerlink.services.storage import StorageService
from empowerlink.services.verification import VerificationWorkflow

router = APIRouter(prefix="/verifications", tags=["verifications"])


@router.get("", response_model=list[VerificationRead])
def list_verifications(
    workflow: VerificationWorkflow = Depends(get_workflow),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    return workflow.list_pending(principal)


@router.post("", response_model=VerificationRead, status_code=status.HTTP_201_CREATED)
def submit_verification(
    document_type: DocumentType = Form(...),
    document_front: UploadFile = File(...),
    document_back: Optional[UploadFile] = File(default=None),
    workflow: VerificationWorkflow = Depends(get_workflow),
    storage: StorageService = Depends(get_storage),
    principal: Principal = Depends(get_current_principal),
):
    front = read_document(document_front)
    back = read_document(document_back) if document_back is not None else None
    front_ref = store_document(storage, document_front, front)
    back_ref = store_document(storage, document_back, back) if back is not None else None
    return workflow.submit(principal, document_type=document_type, front_ref=front_ref, back_ref=back_ref)


def read_document(file: UploadFile) -> bytes:
    content = file.file.read()
    file.file.close()
    if not content:
        raise HTTPException(status_code=400, detail="Invalid file")
    return content


def store_document(storage: StorageService, file: UploadFile, content: bytes) -> str:
    url, _ = storage.upload(
        content=content,
        filename=file.filename or "document",
        content_type=file.content_type or "application/octet-stream",
    )
    return url


@router.get("/{request_id}", response_model=VerificationRead)
def read_verification(
    request_id: int,
    workflow: VerificationWorkflow = Depends(get_workflow),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    return workflow.get(request_id, principal)


@router.patch("/{request_id}", response_model=VerificationRead)
def decide_verification(
    request_id: int,
    payload: VerificationDecision,
    workflow: VerificationWorkflow = Depends(get_workflow),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    return workflow.decide(request_id, payload.status, payload.review_notes, principal)
