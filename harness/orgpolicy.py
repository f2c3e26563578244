"""
Organization policy guardrails that keep serverless workloads internal and CMEK-backed.
"""
from pulumi_gcp import orgpolicy

from putils import component, opts

from .config import ConfigError, PolicyFor

__all__ = 'BOOLEAN_CONSTRAINTS', 'ALLOWED_VALUES', 'DENIED_VALUES', 'policy_parent', 'policy_specs', 'Guardrails'

BOOLEAN_CONSTRAINTS = [
    'constraints/cloudfunctions.requireVPCConnector',
]

ALLOWED_VALUES = {
    'constraints/cloudfunctions.allowedIngressSettings': ['ALLOW_INTERNAL_ONLY'],
    'constraints/cloudfunctions.allowedVpcConnectorEgressSettings': ['ALL_TRAFFIC'],
    'constraints/run.allowedIngress': ['is:internal-and-cloud-load-balancing'],
    'constraints/run.allowedVPCEgress': ['all-traffic'],
}

DENIED_VALUES = {
    # Services listed here can't create resources without a CMEK key
    'constraints/gcp.restrictNonCmekServices': [
        'run.googleapis.com',
        'cloudfunctions.googleapis.com',
        'artifactregistry.googleapis.com',
    ],
}


def policy_parent(kind, project_id=None, folder_id=None, organization_id=None):
    """
    The resource the policies hang off of, eg projects/my-project
    """
    kind = PolicyFor(kind)
    ident = {
        PolicyFor.PROJECT: project_id,
        PolicyFor.FOLDER: folder_id,
        PolicyFor.ORGANIZATION: organization_id,
    }[kind]
    if not ident:
        raise ConfigError(f"Policies are set on the {kind.value}, but no {kind.value} id was given")
    plural = {
        PolicyFor.PROJECT: 'projects',
        PolicyFor.FOLDER: 'folders',
        PolicyFor.ORGANIZATION: 'organizations',
    }[kind]
    return f"{plural}/{ident}"


def policy_specs():
    """
    Yields (constraint, spec) for every guardrail.
    """
    for constraint in BOOLEAN_CONSTRAINTS:
        yield constraint, {'rules': [{'enforce': 'TRUE'}]}
    for constraint, values in ALLOWED_VALUES.items():
        yield constraint, {'rules': [{'values': {'allowed_values': list(values)}}]}
    for constraint, values in DENIED_VALUES.items():
        yield constraint, {'rules': [{'values': {'denied_values': list(values)}}]}


@component(outputs=['policies'])
def Guardrails(self, name, *, parent, __opts__=None):
    """
    One org policy per guardrail constraint, all on the same parent.
    """
    policies = []
    for constraint, spec in policy_specs():
        short = constraint.split('/', 1)[-1]
        policy = orgpolicy.Policy(
            f"{name}-{short}",
            name=f"{parent}/policies/{short}",
            parent=parent,
            spec=spec,
            **opts(parent=self),
        )
        policies.append(policy.name)

    return {
        'policies': policies,
    }
