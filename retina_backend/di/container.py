# Local application imports
from .base_container import BaseContainer
from .providers import AnalysisProvider, InferenceProvider


class DIContainer(BaseContainer):
    """
    Main dependency injection container.
    Composes all providers in the correct order.

    Registration order is important:
    1. Inference infrastructure (InferenceProvider) - registry, clients, prober
    2. Use cases (AnalysisProvider) - depend on the inference clients
    """

    def __init__(self) -> None:
        super().__init__()
        self.setup()

    def setup(self) -> None:
        """
        Setup dependency registrations by composing all providers.
        Order matters: inference infrastructure → use cases
        """
        InferenceProvider.register(self)
        AnalysisProvider.register(self)


# Global container instance (singleton pattern)
_container: DIContainer | None = None


def get_container() -> DIContainer:
    """
    Get the global DI container instance (singleton pattern)

    Returns:
        DIContainer instance with all dependencies registered
    """
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


def reset_container() -> None:
    """Drop the global container so the next lookup rebuilds it"""
    global _container
    _container = None
