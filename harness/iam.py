"""
Turns persona bindings into project IAM members.
"""
import pulumi
from pulumi_gcp import projects as gcp_projects

from putils import component, opts

from .config import ConfigError
from .personas import resolve, unqualified_roles

__all__ = 'as_member', 'PersonaBindings'


def as_member(principal):
    """
    Bare emails are taken to be groups; anything with a type: prefix is left alone.
    """
    if ':' in principal:
        return principal
    return f"group:{principal}"


@component(outputs=['members'])
def PersonaBindings(self, name, *, personas, projects=None, __opts__=None):
    """
    Grants each active persona its fixed roles.

    projects maps each Scope to the project id the roles are granted on.
    """
    if projects is None:
        projects = {}
    bindings = resolve(personas)

    for role in sorted(unqualified_roles(bindings)):
        pulumi.log.warn(f"{name}: role {role!r} is not qualified (missing roles/?)", resource=self)

    members = []
    # Sorted so resources are declared in a stable order
    for binding in sorted(bindings, key=lambda b: (b.scope.value, b.principal, b.role)):
        project = projects.get(binding.scope)
        if not project:
            raise ConfigError(f"No project given for {binding.scope.value}")
        member = as_member(binding.principal)
        members.append(gcp_projects.IAMMember(
            f"{name}-{binding.scope.value}-{binding.role}-{member}",
            project=project,
            role=str(binding.role),
            member=member,
            **opts(parent=self),
        ))

    return {
        'members': members,
    }
