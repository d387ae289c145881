"""
Input validation utilities for the TechVault Store.

Provides reusable validators for slugs, SKUs and resource IDs.
"""
import re

from fastapi import HTTPException, Path

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """
    Derive a URL slug from a display name.

    "Gaming Laptops & PCs" -> "gaming-laptops-pcs"
    """
    slug = _SLUG_STRIP.sub("-", (value or "").strip().lower()).strip("-")
    if not slug:
        raise HTTPException(status_code=400, detail="Cannot derive a slug from an empty name")
    return slug


def normalize_sku(sku: str) -> str:
    """SKUs are stored trimmed and upper-cased so uniqueness is case-insensitive."""
    if not sku or not sku.strip():
        raise HTTPException(status_code=400, detail="SKU is required")
    return sku.strip().upper()


def validate_resource_id(value, name: str = "ID") -> int:
    """
    Validate a numeric resource identifier.

    Raises:
        HTTPException(400) if the value is not a positive integer
    """
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value!r}")
    if ident <= 0:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value!r}")
    return ident


def validated_id(id: str = Path(..., description="Resource ID")) -> int:
    """FastAPI dependency for validating `{id}` path parameters."""
    return validate_resource_id(id)
