"""API dependencies."""
from ..core.generator import get_generator, LevelGenerator
from ..core.session import get_session_registry, SessionRegistry
from ..models.catalogue import get_catalogue, LevelCatalogue


def get_level_generator() -> LevelGenerator:
    """Dependency for level generator."""
    return get_generator()


def get_level_catalogue() -> LevelCatalogue:
    """Dependency for level catalogue."""
    return get_catalogue()


def get_sessions() -> SessionRegistry:
    """Dependency for the live session registry."""
    return get_session_registry()
