from .config_parser import load_app_config, PACKAGE_ROOT
from .ordered_set import OrderedSet

__all__ = ["load_app_config", "PACKAGE_ROOT", "OrderedSet"]
