from .config_loader import ConfigLoader, load_config  # noqa: F401
from .validator import ConfigValidator  # noqa: F401
