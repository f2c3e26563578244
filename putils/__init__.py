from .component import Component, component
from .gcp import NoProjectError, get_project, get_provider, opts

__all__ = (
    'Component', 'component',
    'NoProjectError', 'get_project', 'get_provider', 'opts',
)
