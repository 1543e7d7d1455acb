from __future__ import annotations

from fastapi import Request

from thrune.rules.catalog import Catalog, default_catalog


def get_catalog(request: Request) -> Catalog:
    # set at startup; tests may swap in their own catalog
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        catalog = default_catalog()
        request.app.state.catalog = catalog
    return catalog
