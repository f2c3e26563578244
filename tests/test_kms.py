import pulumi
import pytest

import harness.kms
from harness.config import ConfigError, ProtectionLevel
from harness.kms import GRANT_ROLES, KmsKey, service_agents


def make_key(name, **kwargs):
    args = {
        'project': 'kms-project',
        'location': 'us-central1',
        'keyring': 'ring',
        'key': 'key',
    }
    args.update(kwargs)
    return KmsKey(name, **args)


@pulumi.runtime.test
def test_outputs():
    key = make_key('outputs')

    def check(args):
        key_id, keyring_id, keyring_name = args
        assert key_id == 'outputs-key_id'
        assert keyring_id == 'outputs-keyring_id'
        assert keyring_name == 'ring'

    return pulumi.Output.all(key.key, key.keyring, key.keyring_name).apply(check)


@pulumi.runtime.test
def test_key_settings(mocks):
    key = make_key('settings', rotation_period='86400s', protection_level=ProtectionLevel.SOFTWARE)

    def check(_):
        crypto_key, = mocks.named('settings-key')
        assert crypto_key.inputs['rotationPeriod'] == '86400s'
        assert crypto_key.inputs['versionTemplate']['protectionLevel'] == 'SOFTWARE'
        assert crypto_key.inputs['versionTemplate']['algorithm'] == 'GOOGLE_SYMMETRIC_ENCRYPTION'
        ring, = mocks.named('settings-keyring')
        assert ring.inputs['project'] == 'kms-project'
        assert ring.inputs['location'] == 'us-central1'

    return key.key.apply(check)


@pulumi.runtime.test
def test_grants():
    key = make_key(
        'grants',
        encrypters=['serviceAccount:a@p.iam.gserviceaccount.com', 'serviceAccount:a@p.iam.gserviceaccount.com'],
        decrypters=['serviceAccount:b@p.iam.gserviceaccount.com'],
        owners=['group:owners@example.com', ''],
    )
    assert len(key.grants) == 3

    def check(args):
        assert sorted(zip(args[::2], args[1::2])) == sorted([
            (GRANT_ROLES['encrypter'], 'serviceAccount:a@p.iam.gserviceaccount.com'),
            (GRANT_ROLES['decrypter'], 'serviceAccount:b@p.iam.gserviceaccount.com'),
            ('roles/owner', 'group:owners@example.com'),
        ])

    pairs = []
    for grant in key.grants:
        pairs += [grant.role, grant.member]
    return pulumi.Output.all(*pairs).apply(check)


@pulumi.runtime.test
def test_no_grants():
    key = make_key('nogrants')
    assert key.grants == []


def test_service_agents():
    agents = service_agents('123')
    assert len(agents) == len(set(agents)) == 5
    assert 'serviceAccount:service-123@gcf-admin-robot.iam.gserviceaccount.com' in agents
    assert 'serviceAccount:service-123@serverless-robot-prod.iam.gserviceaccount.com' in agents
    assert all(a.startswith('serviceAccount:service-123@') for a in agents)


@pytest.mark.parametrize('level, expected', [
    ('hardware-backed', 'HSM'),
    ('software', 'SOFTWARE'),
    ('HSM', 'HSM'),
    (ProtectionLevel.SOFTWARE, 'SOFTWARE'),
])
@pulumi.runtime.test
def test_protection_level_spellings(mocks, level, expected):
    name = f"level-{expected.lower()}-{str(level).replace('.', '-').lower()}"
    key = make_key(name, protection_level=level)

    def check(_):
        crypto_key, = mocks.named(f"{name}-key")
        assert crypto_key.inputs['versionTemplate']['protectionLevel'] == expected

    return key.key.apply(check)


@pytest.fixture
def protected(monkeypatch):
    """
    Remembers the protect flag of every resource options KmsKey builds.
    """
    seen = {}
    real_opts = harness.kms.opts

    def spy(**kwargs):
        result = real_opts(**kwargs)
        protect = result['opts'].protect
        seen[protect] = seen.get(protect, 0) + 1
        return result

    monkeypatch.setattr(harness.kms, 'opts', spy)
    return seen


@pytest.mark.parametrize('prevent_destroy', [True, False])
@pulumi.runtime.test
def test_prevent_destroy_protects_key_and_ring(protected, prevent_destroy):
    make_key(f"protect-{prevent_destroy}".lower(), prevent_destroy=prevent_destroy,
             owners=['group:owners@example.com'])
    # The keyring and the key carry the flag; the grant doesn't set it
    assert protected == {prevent_destroy: 2, None: 1}


@pulumi.runtime.test
def test_unknown_protection_level():
    with pytest.raises(ConfigError):
        make_key('level-bogus', protection_level='EXTERNAL')
