from boatrental.api.router import api_router, pages_router, public_router

__all__ = ["api_router", "pages_router", "public_router"]
