"""
Pytest configuration and shared fixtures.

Pulumi mocks have to be installed before any resource is declared, so they
go in at import time here.
"""
import pulumi
import pytest


class RecordingMocks(pulumi.runtime.Mocks):
    """
    Echoes inputs back as state and remembers every resource declared.
    """
    def __init__(self):
        self.resources = []

    def new_resource(self, args):
        self.resources.append(args)
        return [f"{args.name}_id", dict(args.inputs)]

    def call(self, args):
        return {}

    def of_type(self, typ):
        return [r for r in self.resources if r.typ == typ]

    def named(self, name):
        return [r for r in self.resources if r.name == name]


MOCKS = RecordingMocks()
pulumi.runtime.set_mocks(MOCKS, project='secured-serverless', stack='test', preview=False)


@pytest.fixture
def mocks():
    return MOCKS


class FakeConfig:
    """
    Stands in for pulumi.Config, backed by a dict.
    """
    def __init__(self, values):
        self.values = values

    def get(self, key):
        return self.values.get(key)

    def require(self, key):
        if key not in self.values:
            raise KeyError(key)
        return self.values[key]

    def get_bool(self, key):
        return self.values.get(key)

    def get_object(self, key):
        return self.values.get(key)


@pytest.fixture
def fake_config():
    return FakeConfig


@pytest.fixture
def groups():
    return {
        'serverless_administrator': 'admins@example.com',
        'serverless_security_administrator': 'security@example.com',
        'cloud_function_developer': 'developers@example.com',
        'cloud_function_user': None,
    }
