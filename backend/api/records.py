"""Records API: read (masked or unmasked) and replace the stored records."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from api.security import Privilege, ensure_can_unmask, require_read, require_write
from models.schemas import RecordsResponse, WriteResponse
from services.record_service import RecordService, get_record_service

router = APIRouter()


@router.get("/api/data", response_model=RecordsResponse)
async def read_records(
    unmask: bool = Query(False, description="Return unredacted values (write access only)"),
    privilege: Privilege = Depends(require_read),
    service: RecordService = Depends(get_record_service),
):
    """Return the stored records, decrypted and redacted unless unmasked."""
    if unmask:
        ensure_can_unmask(privilege)
    record = await service.read(unmask=unmask)
    return RecordsResponse(record=record, masked=not unmask)


@router.put("/api/data", response_model=WriteResponse)
async def write_records(
    document: Any = Body(...),
    _: Privilege = Depends(require_write),
    service: RecordService = Depends(get_record_service),
):
    """Encrypt sensitive fields and replace the stored records."""
    metadata = await service.write(document)
    return WriteResponse(metadata=metadata)
