"""showtray - Keep every Windows notification-area icon visible, with rollback"""

__version__ = "1.0.0"
__description__ = "Keep every Windows notification-area icon visible, with rollback"

__all__ = ["main", "TrayController", "__version__"]


def __getattr__(name: str):
    """Lazy import so that importing showtray.config or showtray.core does
    not pull in the Windows-only adapters.
    """
    if name == "TrayController":
        from .core.controller import TrayController

        return TrayController
    if name == "main":
        from .main import main

        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
