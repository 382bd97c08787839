"""Search endpoints."""
from fastapi import APIRouter, Depends
from catalog.api.deps import get_search_uow, get_uow
from catalog.api.schemas.search import (
    EntityType, FacetsRead, SearchQuery, SearchResponse, SuggestionList,
)
from catalog.infra.db.uow import UnitOfWork
from catalog.services.search_service import SearchService

router = APIRouter(prefix="/search", tags=["search"])


@router.post("", response_model=SearchResponse)
def search(payload: SearchQuery, uow: UnitOfWork = Depends(get_search_uow)) -> SearchResponse:
    return SearchService(uow).search(payload)


@router.get("/suggestions", response_model=SuggestionList)
def suggestions(
    q: str = "",
    locale: str = "en",
    limit: int = 5,
    uow: UnitOfWork = Depends(get_uow),
) -> SuggestionList:
    return SearchService(uow).suggest(q, locale=locale, limit=limit)


@router.get("/facets", response_model=FacetsRead)
def facets(type: EntityType | None = None, uow: UnitOfWork = Depends(get_uow)) -> FacetsRead:
    return SearchService(uow).facets(type)
