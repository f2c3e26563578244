import os

import pulumi
import pulumi_gcp

__all__ = 'NoProjectError', 'get_project', 'get_provider', 'opts'


class NoProjectError(Exception):
    """
    Raised if we aren't able to detect the current project
    """


_provider_cache = {}


def get_provider(impersonate):
    """
    Gets a provider that acts as the given service account.
    """
    if impersonate not in _provider_cache:
        _provider_cache[impersonate] = pulumi_gcp.Provider(
            f"impersonate-{impersonate}",
            impersonate_service_account=impersonate,
        )

    return _provider_cache[impersonate]


def get_project():
    """
    Gets the ambient GCP project: stack config first, then the environment.
    """
    config = pulumi.Config("gcp").get('project')
    if config:
        return config
    # Same order the google provider uses
    for var in ('GOOGLE_CLOUD_PROJECT', 'GOOGLE_PROJECT', 'CLOUDSDK_CORE_PROJECT'):
        if os.environ.get(var):
            return os.environ[var]
    raise NoProjectError("Unable to determine GCP project")


def opts(*, impersonate=None, **kwargs):
    """
    Defines an opts for resources, including any impersonation.

    The impersonating provider is only applied if this is a top-level component
    (does not have a parent).

    Usage:
    >>> Resource(..., **opts(...))
    """
    if impersonate is not None and 'parent' not in kwargs:
        assert 'provider' not in kwargs
        kwargs['provider'] = get_provider(impersonate)
    return {
        'opts': pulumi.ResourceOptions(**kwargs)
    }
