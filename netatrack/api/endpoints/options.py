"""
Option endpoints - values for filter dropdowns and form selects
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.core.database import get_db
from netatrack.schemas import EntityKind, PartyOption, PoliticianOption
from netatrack.services import options

router = APIRouter()


@router.get("/tags/{kind}", response_model=List[str])
async def existing_tags(kind: EntityKind, db: AsyncSession = Depends(get_db)):
    return await options.get_existing_tags(db, kind)


@router.get("/parties", response_model=List[PartyOption])
async def party_options(db: AsyncSession = Depends(get_db)):
    return await options.get_party_options(db)


@router.get("/politicians", response_model=List[PoliticianOption])
async def politician_options(db: AsyncSession = Depends(get_db)):
    return await options.get_politician_options(db)


@router.get("/ministries", response_model=List[str])
async def bill_ministries(db: AsyncSession = Depends(get_db)):
    return await options.get_bill_ministries(db)


@router.get("/categories", response_model=List[str])
async def promise_categories(db: AsyncSession = Depends(get_db)):
    return await options.get_promise_categories(db)


@router.get("/ideologies", response_model=List[str])
async def party_ideologies(db: AsyncSession = Depends(get_db)):
    return await options.get_party_ideologies(db)


@router.get("/provinces", response_model=List[str])
async def provinces():
    return options.get_provinces()
