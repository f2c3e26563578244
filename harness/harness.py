"""
Everything a secured serverless project needs, wired up from the stack settings.
"""
from putils import component, opts

from .iam import PersonaBindings
from .kms import KmsKey, service_agents
from .orgpolicy import Guardrails, policy_parent
from .personas import Scope

__all__ = 'SecuredServerless',


@component(outputs=['key', 'keyring', 'keyring_name', 'policies', 'grants', 'members'])
def SecuredServerless(self, name, settings, __opts__=None):
    """
    CMEK key, org policy guardrails, and persona role grants.

    The serverless service agents get encrypt/decrypt on the key when the
    serverless project number is known.
    """
    encrypters = list(settings.encrypters)
    decrypters = list(settings.decrypters)
    if settings.serverless_project_number:
        agents = service_agents(settings.serverless_project_number)
        encrypters += agents
        decrypters += agents

    key = KmsKey(
        f"{name}-kms",
        project=settings.kms_project_id,
        location=settings.location,
        keyring=settings.keyring,
        key=settings.key,
        rotation_period=settings.rotation_period,
        protection_level=settings.protection_level,
        prevent_destroy=settings.prevent_destroy,
        encrypters=encrypters,
        decrypters=decrypters,
        owners=settings.owners,
        **opts(parent=self),
    )

    guardrails = Guardrails(
        f"{name}-guardrails",
        parent=policy_parent(
            settings.policy_for,
            project_id=settings.serverless_project_id,
            folder_id=settings.folder_id,
            organization_id=settings.organization_id,
        ),
        **opts(parent=self),
    )

    personas = PersonaBindings(
        f"{name}-personas",
        personas=settings.personas,
        projects={
            Scope.SERVERLESS_PROJECT: settings.serverless_project_id,
            Scope.SECURITY_PROJECT: settings.kms_project_id,
        },
        **opts(parent=self),
    )

    return {
        'key': key.key,
        'keyring': key.keyring,
        'keyring_name': key.keyring_name,
        'policies': guardrails.policies,
        'grants': key.grants,
        'members': personas.members,
    }
