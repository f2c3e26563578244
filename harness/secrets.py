"""
Pushes a certificate into Secret Manager by way of gcloud.
"""
import asyncio
import logging
import os
import re

__all__ = 'SecretsError', 'add_secret_version', 'gcloud_command', 'run'

log = logging.getLogger(__name__)

_created = re.compile(r'Created version \[(?P<version>[^\]]+)\]')


class SecretsError(Exception):
    """
    Raised when gcloud refuses to add the secret version, or can't be run at all.
    """
    def __init__(self, returncode, stderr):
        if returncode is None:
            super().__init__(f"Unable to run gcloud: {stderr.strip()}")
        else:
            super().__init__(f"gcloud exited with {returncode}: {stderr.strip()}")
        self.returncode = returncode
        self.stderr = stderr


def gcloud_command(secret, *, project, impersonate):
    return [
        'gcloud', 'secrets', 'versions', 'add', secret,
        '--data-file=-',
        f'--impersonate-service-account={impersonate}',
        f'--project={project}',
    ]


async def _call_subprocess(*cmd, input=None, **opts):
    cmd = [
        os.fspath(part) if hasattr(part, '__fspath__') else part
        for part in cmd
    ]
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            **opts,
        )
    except OSError as e:
        # Usually gcloud isn't on PATH
        raise SecretsError(None, f"{cmd[0]}: {e.strerror or e}") from e
    stdout, stderr = await proc.communicate(input)
    return proc.returncode, stdout.decode(errors='replace'), stderr.decode(errors='replace')


async def add_secret_version(secret, *, project, impersonate, payload):
    """
    Adds payload as a new version of the secret, acting as the impersonated
    service account. Returns the new version, if gcloud said what it was.
    """
    if isinstance(payload, str):
        payload = payload.encode()
    log.info("Adding a version to %s in %s as %s", secret, project, impersonate)
    returncode, stdout, stderr = await _call_subprocess(
        *gcloud_command(secret, project=project, impersonate=impersonate),
        input=payload,
    )
    if returncode != 0:
        raise SecretsError(returncode, stderr)

    # gcloud reports on stderr
    match = _created.search(stderr) or _created.search(stdout)
    return match.group('version') if match else None


def run(coro):
    """
    Runs coro to completion on a private loop, leaving the current one alone.
    """
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()
