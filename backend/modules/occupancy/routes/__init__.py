from .occupancy_routes import router as occupancy_router

__all__ = ["occupancy_router"]
