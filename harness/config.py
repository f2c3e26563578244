"""
Stack configuration for the secured serverless harness.

Everything lives under the ``secured-serverless`` namespace, eg:

    pulumi config set secured-serverless:kms-project-id my-kms-project
    pulumi config set --path 'secured-serverless:groups.cloud_function_user' users@example.com
"""
import dataclasses
import enum
import re
from typing import Mapping, Optional, Tuple

import pulumi

from putils import get_project

from .personas import Persona

__all__ = 'NAMESPACE', 'ConfigError', 'ProtectionLevel', 'PolicyFor', 'Settings', 'parse_rotation_period'

NAMESPACE = 'secured-serverless'

MIN_ROTATION_SECONDS = 24 * 60 * 60  # KMS won't rotate more often than daily


class ConfigError(ValueError):
    """
    Raised when the stack configuration doesn't make sense.
    """


class ProtectionLevel(enum.Enum):
    SOFTWARE = 'SOFTWARE'
    HSM = 'HSM'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        aliases = {
            'software': cls.SOFTWARE,
            'hardware-backed': cls.HSM,
            'hsm': cls.HSM,
        }
        try:
            return aliases[str(value).lower()]
        except KeyError:
            raise ConfigError(f"Unknown key protection level: {value!r}") from None


class PolicyFor(enum.Enum):
    PROJECT = 'project'
    FOLDER = 'folder'
    ORGANIZATION = 'organization'


_duration = re.compile(r'^(\d+)s$')


def parse_rotation_period(value):
    """
    Checks a KMS rotation period ("<seconds>s") and returns it unchanged.
    """
    match = _duration.match(str(value))
    if match is None:
        raise ConfigError(f"Rotation period must look like '2592000s', not {value!r}")
    if int(match.group(1)) < MIN_ROTATION_SECONDS:
        raise ConfigError(f"Rotation period {value} is shorter than one day")
    return value


def _parse_groups(groups):
    personas = {}
    for slot, principal in (groups or {}).items():
        try:
            persona = Persona(slot)
        except ValueError:
            raise ConfigError(f"Unknown persona in groups: {slot!r}") from None
        personas[persona] = principal or None
    return personas


@dataclasses.dataclass(frozen=True)
class Settings:
    kms_project_id: str
    serverless_project_id: str
    serverless_project_number: Optional[str] = None
    folder_id: Optional[str] = None
    organization_id: Optional[str] = None
    location: str = 'us-central1'
    keyring: str = 'serverless-keyring'
    key: str = 'serverless-key'
    rotation_period: str = '2592000s'
    protection_level: ProtectionLevel = ProtectionLevel.HSM
    prevent_destroy: bool = True
    encrypters: Tuple[str, ...] = ()
    decrypters: Tuple[str, ...] = ()
    owners: Tuple[str, ...] = ()
    personas: Mapping[Persona, Optional[str]] = dataclasses.field(default_factory=dict)
    policy_for: PolicyFor = PolicyFor.PROJECT
    impersonate_service_account: Optional[str] = None

    def __post_init__(self):
        parse_rotation_period(self.rotation_period)
        if self.policy_for is PolicyFor.FOLDER and not self.folder_id:
            raise ConfigError("policy-for is 'folder' but folder-id isn't set")
        if self.policy_for is PolicyFor.ORGANIZATION and not self.organization_id:
            raise ConfigError("policy-for is 'organization' but organization-id isn't set")

    @classmethod
    def from_config(cls, config=None):
        """
        Read the settings out of the stack config.
        """
        if config is None:
            config = pulumi.Config(NAMESPACE)

        try:
            policy_for = PolicyFor(config.get('policy-for') or 'project')
        except ValueError:
            raise ConfigError(f"Unknown policy-for: {config.get('policy-for')!r}") from None

        serverless_project_id = config.get('serverless-project-id') or get_project()

        defaults = {f.name: f.default for f in dataclasses.fields(cls)}

        return cls(
            kms_project_id=config.require('kms-project-id'),
            serverless_project_id=serverless_project_id,
            serverless_project_number=config.get('serverless-project-number'),
            folder_id=config.get('folder-id'),
            organization_id=config.get('organization-id'),
            location=config.get('location') or defaults['location'],
            keyring=config.get('keyring') or defaults['keyring'],
            key=config.get('key') or defaults['key'],
            rotation_period=config.get('key-rotation-period') or defaults['rotation_period'],
            protection_level=ProtectionLevel.parse(
                config.get('key-protection-level') or defaults['protection_level'].value
            ),
            prevent_destroy=config.get_bool('prevent-destroy') is not False,
            encrypters=tuple(config.get_object('encrypters') or ()),
            decrypters=tuple(config.get_object('decrypters') or ()),
            owners=tuple(config.get_object('owners') or ()),
            personas=_parse_groups(config.get_object('groups')),
            policy_for=policy_for,
            impersonate_service_account=config.get('impersonate-service-account'),
        )
