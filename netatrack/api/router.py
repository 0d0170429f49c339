"""
API Router - aggregates all endpoint routers
"""
from fastapi import APIRouter

from netatrack.api.endpoints import bills, me, news, options, parties, politicians, promises, suggestions

api_router = APIRouter()

api_router.include_router(politicians.router, prefix="/politicians", tags=["Politicians"])
api_router.include_router(parties.router, prefix="/parties", tags=["Parties"])
api_router.include_router(promises.router, prefix="/promises", tags=["Promises"])
api_router.include_router(bills.router, prefix="/bills", tags=["Bills"])
api_router.include_router(suggestions.router, prefix="/suggestions", tags=["Suggestions"])
api_router.include_router(options.router, prefix="/options", tags=["Options"])
api_router.include_router(news.router, prefix="/news", tags=["News"])
api_router.include_router(me.router, prefix="/me", tags=["Profile"])
