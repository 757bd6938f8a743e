"""Travel package router for catalog and administration operations."""

import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, DatabaseSession
from ..core.exceptions import ProblemDetailsException
from ..schemas.package import (
    CreatePackageRequest,
    SearchPackagesParams,
    TravelPackage,
    UpdatePackageRequest,
)
from ..services.package_service import PackageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/travelpackages", tags=["travel packages"])


def _package_list_response(packages) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=[TravelPackage.model_validate(p).model_dump(mode="json") for p in packages]
    )


@router.get("", response_model=list[TravelPackage])
async def list_packages(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """List every package, active or not."""
    packages = await PackageService(db).list_packages()
    return _package_list_response(packages)


@router.get("/active", response_model=list[TravelPackage])
async def list_active_packages(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """List active packages that have not started yet."""
    packages = await PackageService(db).list_active_packages()
    return _package_list_response(packages)


@router.get("/search", response_model=list[TravelPackage])
async def search_packages(
    destination: Optional[str] = Query(None, max_length=100),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Search active packages by destination substring and price range."""
    params = SearchPackagesParams(
        destination=destination,
        min_price=min_price,
        max_price=max_price
    )
    packages = await PackageService(db).search_packages(params)
    return _package_list_response(packages)


@router.get("/{package_id}", response_model=TravelPackage)
async def get_package(
    package_id: int,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Get a package by ID."""
    package = await PackageService(db).get_package_by_id_or_raise(package_id)
    return JSONResponse(
        status_code=200,
        content=TravelPackage.model_validate(package).model_dump(mode="json")
    )


@router.post("", response_model=TravelPackage, status_code=201)
async def create_package(
    request: CreatePackageRequest,
    db: AsyncSession = DatabaseSession,
    current_user: dict = AdminAuth
) -> JSONResponse:
    """
    Create a travel package.

    The package starts active with every slot available.
    """
    try:
        package = await PackageService(db).create_package(request)
        response_data = TravelPackage.model_validate(package)

        return JSONResponse(
            status_code=201,
            content=response_data.model_dump(mode="json"),
            headers={"Location": f"{router.prefix}/{package.id}"}
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in package creation",
            extra={
                "title": request.title,
                "admin_user_id": current_user["user_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/{package_id}", response_model=TravelPackage)
async def update_package(
    package_id: int,
    request: UpdatePackageRequest,
    db: AsyncSession = DatabaseSession,
    current_user: dict = AdminAuth
) -> JSONResponse:
    """
    Update a travel package.

    Changing max_capacity shifts available_slots by the same amount; a
    capacity below the slots already booked is rejected with 409.
    """
    try:
        package = await PackageService(db).update_package(package_id, request)
        response_data = TravelPackage.model_validate(package)

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in package update",
            extra={
                "package_id": package_id,
                "admin_user_id": current_user["user_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.delete("/{package_id}", status_code=204)
async def delete_package(
    package_id: int,
    hard: bool = Query(False, description="Remove the row instead of deactivating it"),
    db: AsyncSession = DatabaseSession,
    current_user: dict = AdminAuth
) -> Response:
    """
    Delete a travel package.

    By default the package is deactivated so existing bookings keep their
    reference; ``hard=true`` removes a package that has no bookings.
    """
    try:
        await PackageService(db).delete_package(package_id, hard=hard)
        return Response(status_code=204)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in package deletion",
            extra={
                "package_id": package_id,
                "hard": hard,
                "admin_user_id": current_user["user_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e
