"""
Secured serverless harness: CMEK keys, org policy guardrails, and persona
role grants for Cloud Run / Cloud Functions projects.
"""
from .config import ConfigError, Settings
from .harness import SecuredServerless
from .iam import PersonaBindings
from .kms import KmsKey
from .orgpolicy import Guardrails
from .personas import Binding, Persona, Principal, Role, Scope, resolve

__all__ = (
    'ConfigError', 'Settings', 'SecuredServerless', 'PersonaBindings', 'KmsKey',
    'Guardrails', 'Binding', 'Persona', 'Principal', 'Role', 'Scope', 'resolve',
)
