# pavilion/routers/__init__.py

from . import auth, catalog, sales, storefront

__all__ = ["auth", "catalog", "sales", "storefront"]
