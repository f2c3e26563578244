import pulumi
from putils import opts
from harness import SecuredServerless, Settings

settings = Settings.from_config()

harness = SecuredServerless(
    'SecuredServerless',
    settings,
    **opts(impersonate=settings.impersonate_service_account)
)

pulumi.export('key', harness.key)
pulumi.export('keyring', harness.keyring)
pulumi.export('keyring_name', harness.keyring_name)
pulumi.export('policies', harness.policies)
