from .analyze_retina_image import AnalyzeRetinaImageUseCase

__all__ = ["AnalyzeRetinaImageUseCase"]
