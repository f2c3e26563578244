"""
Maps operator personas onto the fixed bundles of roles they get.

Only computes desired state; Pulumi does the diff and apply.
"""
import enum
from typing import Iterable, Mapping, NamedTuple, Optional, Tuple, Union

__all__ = (
    'Persona', 'Scope', 'Role', 'Principal', 'Binding', 'ROLE_TABLE',
    'roles_for', 'scope_for', 'resolve', 'unqualified_roles',
)


class Persona(enum.Enum):
    SERVERLESS_ADMINISTRATOR = 'serverless_administrator'
    SERVERLESS_SECURITY_ADMINISTRATOR = 'serverless_security_administrator'
    CLOUD_FUNCTION_DEVELOPER = 'cloud_function_developer'
    CLOUD_FUNCTION_USER = 'cloud_function_user'


class Scope(enum.Enum):
    SERVERLESS_PROJECT = 'serverless_project'
    #: The project holding the KMS keys
    SECURITY_PROJECT = 'security_project'


class Role(str):
    """
    An IAM role name, eg roles/run.admin.

    The role catalog is open-ended (custom roles), so this only checks shape.
    """
    QUALIFIERS = ('roles/', 'projects/', 'organizations/')

    def __new__(cls, value):
        if not isinstance(value, str) or not value or any(c.isspace() for c in value):
            raise ValueError(f"Not a role name: {value!r}")
        return super().__new__(cls, value)

    @property
    def qualified(self):
        return self.startswith(self.QUALIFIERS)


class Binding(NamedTuple):
    scope: Scope
    role: Role
    principal: str


Principal = Optional[str]


def _roles(*names):
    return tuple(Role(n) for n in names)


ROLE_TABLE = {
    Persona.SERVERLESS_ADMINISTRATOR: (Scope.SERVERLESS_PROJECT, _roles(
        'roles/run.admin',
        'roles/cloudfunctions.admin',
        'roles/compute.networkViewer',
        # FIXME: Missing the roles/ prefix; kept as declared until someone confirms the intent
        'compute.networkUser',
    )),
    Persona.SERVERLESS_SECURITY_ADMINISTRATOR: (Scope.SECURITY_PROJECT, _roles(
        'roles/cloudkms.viewer',
        'roles/cloudkms.admin',
        'roles/run.viewer',
        'roles/artifactregistry.reader',
    )),
    Persona.CLOUD_FUNCTION_DEVELOPER: (Scope.SERVERLESS_PROJECT, _roles(
        'roles/run.developer',
        'roles/cloudfunctions.developer',
        'roles/artifactregistry.writer',
        'roles/cloudkms.cryptoKeyEncrypter',
    )),
    Persona.CLOUD_FUNCTION_USER: (Scope.SERVERLESS_PROJECT, _roles(
        'roles/run.invoker',
        'roles/cloudfunctions.invoker',
    )),
}


def roles_for(persona: Persona) -> Tuple[Role, ...]:
    return ROLE_TABLE[Persona(persona)][1]


def scope_for(persona: Persona) -> Scope:
    return ROLE_TABLE[Persona(persona)][0]


def resolve(personas: Mapping[Union[Persona, str], Principal]) -> frozenset:
    """
    Produce the (scope, role, principal) bindings for the active personas.

    A persona whose principal is None or empty contributes nothing. Keys may
    be Persona members or their string values.
    """
    bindings = set()
    for persona, principal in personas.items():
        persona = Persona(persona)
        if not principal:
            continue
        scope, roles = ROLE_TABLE[persona]
        bindings.update(Binding(scope, role, principal) for role in roles)
    return frozenset(bindings)


def unqualified_roles(bindings: Iterable[Binding]) -> set:
    """
    Roles that don't look like roles/..., projects/... or organizations/...
    """
    return {b.role for b in bindings if not b.role.qualified}
