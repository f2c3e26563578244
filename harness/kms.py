"""
The customer-managed encryption key the serverless workloads are sealed with.
"""
import pulumi
from pulumi_gcp import kms

from putils import component, opts

from .config import ProtectionLevel

__all__ = 'GRANT_ROLES', 'KmsKey', 'service_agents'

GRANT_ROLES = {
    'encrypter': 'roles/cloudkms.cryptoKeyEncrypter',
    'decrypter': 'roles/cloudkms.cryptoKeyDecrypter',
    'owner': 'roles/owner',
}


def service_agents(project_number):
    """
    The Google-managed identities that need to use the key on behalf of the
    serverless project.
    """
    return [
        f"serviceAccount:service-{project_number}@gcf-admin-robot.iam.gserviceaccount.com",
        f"serviceAccount:service-{project_number}@serverless-robot-prod.iam.gserviceaccount.com",
        f"serviceAccount:service-{project_number}@gcp-sa-artifactregistry.iam.gserviceaccount.com",
        f"serviceAccount:service-{project_number}@gcp-sa-eventarc.iam.gserviceaccount.com",
        f"serviceAccount:service-{project_number}@gs-project-accounts.iam.gserviceaccount.com",
    ]


def _unique(principals):
    # Keeps the first-seen order, so resource names stay put between runs
    return list(dict.fromkeys(p for p in principals if p))


@component(outputs=['key', 'keyring', 'keyring_name', 'grants'])
def KmsKey(self, name, *, project, location, keyring, key,
           rotation_period='2592000s', protection_level=ProtectionLevel.HSM,
           prevent_destroy=True, encrypters=(), decrypters=(), owners=(), __opts__=None):
    """
    A keyring with a single symmetric key in it, plus the IAM grants on the key.
    """
    ring = kms.KeyRing(
        f"{name}-keyring",
        name=keyring,
        location=location,
        project=project,
        **opts(parent=self, protect=prevent_destroy),
    )

    crypto_key = kms.CryptoKey(
        f"{name}-key",
        name=key,
        key_ring=ring.id,
        rotation_period=rotation_period,
        purpose='ENCRYPT_DECRYPT',
        version_template={
            'algorithm': 'GOOGLE_SYMMETRIC_ENCRYPTION',
            'protection_level': ProtectionLevel.parse(protection_level).value,
        },
        **opts(parent=self, protect=prevent_destroy),
    )

    grants = []
    for kind, principals in (('encrypter', encrypters), ('decrypter', decrypters), ('owner', owners)):
        for member in _unique(principals):
            grants.append(kms.CryptoKeyIAMMember(
                f"{name}-{kind}-{member}",
                crypto_key_id=crypto_key.id,
                role=GRANT_ROLES[kind],
                member=member,
                **opts(parent=self),
            ))
    pulumi.log.debug(f"{name}: {len(grants)} grants on {key}")

    return {
        'key': crypto_key.id,
        'keyring': ring.id,
        'keyring_name': ring.name,
        'grants': grants,
    }
