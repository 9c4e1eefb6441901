from docgroup.core.settings.settings import Settings, as_bool

__all__ = ["Settings", "as_bool"]
