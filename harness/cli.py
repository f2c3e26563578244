import logging

import click

from .secrets import SecretsError, add_secret_version, run


@click.group()
@click.option('-v', '--verbose', is_flag=True, help="Say what is being run.")
def main(verbose):
    """
    Helpers for the secured serverless harness.
    """
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)


@main.command('create-certificate-secret')
@click.argument('service_account')
@click.argument('secret')
@click.argument('project')
@click.argument('certificate', required=False)
@click.option('--certificate-file', type=click.File('r'),
              help="Read the certificate from this file ('-' for stdin).")
def create_certificate_secret(service_account, secret, project, certificate, certificate_file):
    """
    Store CERTIFICATE as a new version of SECRET in PROJECT, acting as SERVICE_ACCOUNT.
    """
    if certificate is None and certificate_file is None:
        raise click.UsageError("Give either CERTIFICATE or --certificate-file")
    if certificate is not None and certificate_file is not None:
        raise click.UsageError("Give only one of CERTIFICATE and --certificate-file")
    if certificate_file is not None:
        certificate = certificate_file.read()

    try:
        version = run(add_secret_version(
            secret, project=project, impersonate=service_account, payload=certificate,
        ))
    except SecretsError as e:
        raise click.ClickException(str(e))

    if version is None:
        click.echo(f"Added a version to {secret}")
    else:
        click.echo(f"Added version {version} to {secret}")


if __name__ == '__main__':
    main()
