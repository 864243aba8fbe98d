from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.schemas.common import Envelope, ok
from pitaka.schemas.transfer import BankResponse
from pitaka.services import transfer_service

router = APIRouter()


@router.get("", response_model=Envelope[list[BankResponse]], summary="List interbank destinations")
async def list_banks(db: AsyncSession = Depends(get_db)):
    """Banks that accept interbank transfers, with each bank's flat fee."""
    return ok(await transfer_service.list_banks(db))
