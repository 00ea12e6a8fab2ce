"""Session — SessionBootstrapper and the store-selection rule."""

from basil_core.session.bootstrapper import SessionBootstrapper, resolve_store_selection

__all__ = ["SessionBootstrapper", "resolve_store_selection"]
