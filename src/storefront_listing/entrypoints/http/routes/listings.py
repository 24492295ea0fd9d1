from fastapi import APIRouter, Depends, Response, status

from storefront_listing.entrypoints.http.dependencies import (
    get_base_path,
    get_catalog_query_client,
    get_customer_context_provider,
    get_listing_page_size,
    get_listing_registry,
)
from storefront_listing.entrypoints.http.dtos.listing import (
    CreateListingDTO,
    FiltersChangedDTO,
    ListingResponseDTO,
    SearchTermChangedDTO,
    SortChangedDTO,
)
from storefront_listing.entrypoints.http.listing_registry import ListingRegistry
from storefront_listing.entrypoints.http.mappers.listing_mapper import ListingMapper
from storefront_listing.ports.catalog_query_client import CatalogQueryClient
from storefront_listing.ports.customer_context_provider import CustomerContextProvider
from storefront_listing.use_cases.catalog_listing_coordinator import CatalogListingCoordinator


router = APIRouter(prefix="/listings", tags=["Listings"])


@router.post(
    "",
    response_model=ListingResponseDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Open a product listing",
    description="""
    Opens a listing session for a catalog page and loads its first page.

    ## Behaviour
    - `phrase` and `category` come from the page URL
    - Catalog failures are reported in `error_state`, not as HTTP errors
    - An empty result carries `empty_state` and the label `0 products`
    """,
)
async def create_listing(
    body: CreateListingDTO,
    registry: ListingRegistry = Depends(get_listing_registry),
    catalog_client: CatalogQueryClient = Depends(get_catalog_query_client),
    customers: CustomerContextProvider = Depends(get_customer_context_provider),
    page_size: int = Depends(get_listing_page_size),
    base_path: str = Depends(get_base_path),
) -> ListingResponseDTO:
    coordinator = CatalogListingCoordinator(
        catalog_client=catalog_client,
        customer_context_provider=customers,
        query=ListingMapper.to_initial_query(body, page_size),
    )
    listing_id = registry.add(coordinator)

    await coordinator.load_initial()

    return ListingMapper.to_response(listing_id, coordinator.snapshot(), base_path)


@router.get("/{listing_id}", response_model=ListingResponseDTO, summary="Current listing")
def get_listing(
    listing_id: str,
    registry: ListingRegistry = Depends(get_listing_registry),
    base_path: str = Depends(get_base_path),
) -> ListingResponseDTO:
    coordinator = registry.get(listing_id)
    return ListingMapper.to_response(listing_id, coordinator.snapshot(), base_path)


@router.post(
    "/{listing_id}/filters",
    response_model=ListingResponseDTO,
    summary="Apply facet filters",
    description="Replaces the active filters (or clears filters and search term on `reset`) and reloads from page 1.",
)
async def apply_filters(
    listing_id: str,
    body: FiltersChangedDTO,
    registry: ListingRegistry = Depends(get_listing_registry),
    base_path: str = Depends(get_base_path),
) -> ListingResponseDTO:
    coordinator = registry.get(listing_id)
    if body.reset:
        await coordinator.apply_filters(reset=True)
    else:
        await coordinator.apply_filters(ListingMapper.to_domain_filters(body))

    return ListingMapper.to_response(listing_id, coordinator.snapshot(), base_path)


@router.post("/{listing_id}/search", response_model=ListingResponseDTO, summary="Search within listing")
async def apply_search(
    listing_id: str,
    body: SearchTermChangedDTO,
    registry: ListingRegistry = Depends(get_listing_registry),
    base_path: str = Depends(get_base_path),
) -> ListingResponseDTO:
    coordinator = registry.get(listing_id)
    await coordinator.apply_search(body.search_term)
    return ListingMapper.to_response(listing_id, coordinator.snapshot(), base_path)


@router.post("/{listing_id}/sort", response_model=ListingResponseDTO, summary="Change sort order")
async def apply_sort(
    listing_id: str,
    body: SortChangedDTO,
    registry: ListingRegistry = Depends(get_listing_registry),
    base_path: str = Depends(get_base_path),
) -> ListingResponseDTO:
    coordinator = registry.get(listing_id)
    await coordinator.apply_sort(body.sort_by)
    return ListingMapper.to_response(listing_id, coordinator.snapshot(), base_path)


@router.post(
    "/{listing_id}/more",
    response_model=ListingResponseDTO,
    summary="Load the next page",
    description="Scroll-proximity trigger. A no-op once every match is loaded.",
)
async def load_more(
    listing_id: str,
    registry: ListingRegistry = Depends(get_listing_registry),
    base_path: str = Depends(get_base_path),
) -> ListingResponseDTO:
    coordinator = registry.get(listing_id)
    await coordinator.maybe_load_more()
    return ListingMapper.to_response(listing_id, coordinator.snapshot(), base_path)


@router.post("/{listing_id}/retry", response_model=ListingResponseDTO, summary="Reload after an error")
async def retry(
    listing_id: str,
    registry: ListingRegistry = Depends(get_listing_registry),
    base_path: str = Depends(get_base_path),
) -> ListingResponseDTO:
    coordinator = registry.get(listing_id)
    await coordinator.retry()
    return ListingMapper.to_response(listing_id, coordinator.snapshot(), base_path)


@router.delete(
    "/{listing_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Close a listing",
)
def close_listing(
    listing_id: str,
    registry: ListingRegistry = Depends(get_listing_registry),
) -> Response:
    registry.close(listing_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
