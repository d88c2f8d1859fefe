from .analysis_controller import router as analysis_router


__all__ = ["analysis_router"]
