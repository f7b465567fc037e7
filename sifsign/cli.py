"""SifSign CLI application with Typer."""

import logging
from pathlib import Path
from typing import Annotated

import typer

from sifsign import __version__
from sifsign.app.keypair_service import NewPairFlags, ProvisionOutcome
from sifsign.app.ports import KeyHandle, VerificationReport
from sifsign.bootstrap import bootstrap_application
from sifsign.config import get_settings, set_settings
from sifsign.errors import (
    ConfigurationError,
    GenerationError,
    InputError,
    KeystoreConfigError,
    ValidationError,
    VerificationError,
)

FATAL_EXIT_CODE = 255

app = typer.Typer(
    name="sifsign",
    help="Key pair provisioning and signature verification for container images",
    add_completion=True,
    no_args_is_help=True,
)
key_app = typer.Typer(help="Key pair management")
app.add_typer(key_app, name="key")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"SifSign version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", "-d", help="Print debug logging"),
    ] = False,
    keyring_dir: Annotated[
        Path | None,
        typer.Option("--keyring-dir", help="Override keyring directory"),
    ] = None,
) -> None:
    """SifSign - sign-side key management and image verification."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    settings = get_settings()
    if keyring_dir:
        settings.keyring_dir = keyring_dir
    set_settings(settings)


@key_app.command("newpair")
def key_newpair(
    name: Annotated[
        str | None,
        typer.Option("--name", "-N", help="Key owner name"),
    ] = None,
    email: Annotated[
        str | None,
        typer.Option("--email", "-E", help="Key owner email"),
    ] = None,
    comment: Annotated[
        str | None,
        typer.Option("--comment", "-C", help="Key comment"),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-P", help="Key password"),
    ] = None,
    push: Annotated[
        bool | None,
        typer.Option(
            "--push/--no-push",
            "-U",
            help="Push the public key to the remote keystore (asked interactively when omitted)",
        ),
    ] = None,
) -> None:
    """Generate a new key pair, optionally pushing the public key to the keystore."""

    container = bootstrap_application()
    flags = NewPairFlags(name=name, email=email, comment=comment, password=password, push=push)

    try:
        request = container.collector.collect(flags)
    except (InputError, ConfigurationError) as exc:
        typer.secho(f"Error: could not collect user input: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc

    typer.echo("Generating Entity and OpenPGP Key Pair... ", nl=False)
    try:
        result = container.keypair_service.provision(request)
    except GenerationError as exc:
        typer.echo()
        typer.secho(f"Error: creating newpair failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc
    except KeystoreConfigError as exc:
        if exc.key is not None:
            typer.echo("done")
            _print_key(exc.key)
        else:
            typer.echo()
        typer.secho(f"Fatal: Keyserver client failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=FATAL_EXIT_CODE) from exc
    typer.echo("done")
    _print_key(result.key)

    if result.outcome is ProvisionOutcome.SKIPPED:
        typer.echo(f"NOT pushing newly created key to: {result.keyserver_url}")
    elif result.outcome is ProvisionOutcome.PUBLISH_FAILED:
        typer.secho(
            f"Failed to push newly created key to keystore: {result.detail}",
            fg=typer.colors.YELLOW,
        )
    else:
        typer.secho(f"Key successfully pushed to: {result.keyserver_url}", fg=typer.colors.GREEN)


def _print_key(key: KeyHandle) -> None:
    typer.echo(f"Key owner: {key.user_id}")
    typer.echo(f"Key fingerprint: {key.fingerprint}")


def _print_report(report: VerificationReport) -> None:
    for obj in report.objects:
        if obj.verified:
            signer = obj.signer or f"key {obj.fingerprint}"
            typer.secho(f"  ✓ object {obj.object_id} signed by {signer}", fg=typer.colors.GREEN)
        else:
            typer.secho(
                f"  ✗ object {obj.object_id} ({obj.fingerprint}): {obj.detail}",
                fg=typer.colors.RED,
            )


@app.command("verify")
def verify(
    image_path: Annotated[
        str,
        typer.Argument(help="Path to the container image to verify"),
    ],
    url: Annotated[
        str | None,
        typer.Option("--url", "-u", help="Key server URL (defaults to the configured keyserver)"),
    ] = None,
    group_id: Annotated[
        int,
        typer.Option("--groupid", "-g", help="Group ID to be verified"),
    ] = 0,
    descriptor_id: Annotated[
        int,
        typer.Option("--id", "-i", help="Descriptor ID to be verified"),
    ] = 0,
) -> None:
    """Verify the signature(s) of a container image."""

    container = bootstrap_application()
    keyserver_url = url if url is not None else container.settings.keyserver_url

    try:
        report = container.verify_service.verify(
            image_path,
            keyserver_url,
            group_id=group_id,
            descriptor_id=descriptor_id,
            progress=typer.echo,
        )
    except (ValidationError, VerificationError) as exc:
        report = getattr(exc, "report", None)
        if report is not None:
            _print_report(report)
        typer.secho(f"Error: verification failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc

    _print_report(report)
    typer.secho(f"Container verified: {image_path}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
