"""Tech-pack web route modules.

Each module exports a `router` (APIRouter instance) that the app in
techpack.web.app includes.
"""

from techpack.web.routes import exports, health, products, tech_packs

__all__ = ["health", "products", "tech_packs", "exports"]
