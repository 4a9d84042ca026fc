"""Main CLI entrypoint for clawup."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional

import click

from ..config import DEFAULT_PORT, MANIFEST_FILENAME, ProvisionOptions
from ..errors import Cancelled, ProvisionError
from ..manifest import TOKEN_ENV
from ..params import default_install_dir
from ..provisioner import ProvisionResult, run_provisioning
from ..redact import REDACTED
from ..runtime import ComposeRunner, check_environment


@click.group()
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.option('-v', '--verbose', is_flag=True, help='Show debug logging')
@click.pass_context
def main(ctx, output_json, verbose):
    """clawup - install and run a local OpenClaw gateway in Docker."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = output_json
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


def _json_output(data: Dict[str, Any]) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=None))


def _human_output(message: str, **style) -> None:
    """Output human-readable message."""
    if not click.get_current_context().obj.get('json', False):
        click.echo(click.style(message, **style) if style else message)


def _fail(error: ProvisionError) -> NoReturn:
    if click.get_current_context().obj.get('json', False):
        _json_output({'error': error.message, 'hint': error.hint, 'type': type(error).__name__})
    else:
        click.echo(click.style(f"❌ {error.message}", fg='red'), err=True)
        if error.hint:
            click.echo(error.hint, err=True)
    sys.exit(error.exit_code)


def _interactive_to_stderr() -> bool:
    # keeps stdout a single JSON document
    return click.get_current_context().obj.get('json', False)


def _prompt(message: str, default: str) -> str:
    try:
        return click.prompt(message, default=default, show_default=True, err=_interactive_to_stderr())
    except click.Abort:
        raise Cancelled("Installation cancelled by user", hint="")


def _confirm(summary: str) -> bool:
    err = _interactive_to_stderr()
    click.echo(summary, err=err)
    try:
        return click.confirm('Proceed with the installation?', default=True, err=err)
    except click.Abort:
        raise Cancelled("Installation cancelled by user", hint="")


def _install_dir(path: Optional[str]) -> Path:
    return Path(path).expanduser().absolute() if path else default_install_dir()


def _result_dict(result: ProvisionResult, show_token: bool) -> Dict[str, Any]:
    status = result.launch.status
    data = {
        'state': result.state.value,
        'install_dir': str(result.config.install_dir),
        'port': result.config.port,
        'url': result.access_url,
        'compose': result.handle.compose_display,
        'service_state': status.state.value,
        'service_health': status.health.value,
        'http_reachable': result.launch.http_reachable,
        'token': result.token.value if show_token else REDACTED,
        'token_source': result.token.provider,
    }
    if result.launch.warning:
        data['warning'] = str(result.launch.warning)
    return data


def _print_summary(result: ProvisionResult) -> None:
    compose = result.handle.compose_display
    install_dir = result.config.install_dir

    if result.verified:
        _human_output("✅ OpenClaw gateway is up.", fg='green')
    else:
        _human_output(f"⚠️  {result.launch.warning}", fg='yellow')
        _human_output(f"   Check the logs: cd {install_dir} && {compose} logs")

    if result.token.weak:
        _human_output(f"⚠️  The token came from a weak source ({result.token.provider}).", fg='yellow')

    _human_output("")
    _human_output(f"🌐 URL:   {result.access_url}")
    _human_output(f"🔑 Token: {result.token.value}")
    _human_output("   Keep this token safe: it is the only credential for the gateway.")
    _human_output(f"   It is also stored in {result.config.manifest_path} ({TOKEN_ENV}).")
    _human_output("")
    _human_output(f"📂 Data:  {install_dir}")
    _human_output(f"🛠️  Logs:  cd {install_dir} && {compose} logs -f")
    _human_output(f"🛑 Stop:  cd {install_dir} && {compose} down")


@main.command('install')
@click.option('--dir', 'install_dir', help='Install directory (prompted when omitted)')
@click.option('--port', help=f'Host port for the web console (default {DEFAULT_PORT})')
@click.option('-y', '--yes', '--non-interactive', 'assume_yes', is_flag=True,
              help='Use defaults for anything not given and skip the confirmation')
@click.option('--no-overwrite', is_flag=True, help='Abort if a manifest already exists')
@click.option('--settle-seconds', type=float, help='Wait before checking the service state')
@click.option('--skip-http-check', is_flag=True, help='Do not probe the access URL')
@click.option('--allow-weak-token', is_flag=True, help='Accept a non-cryptographic token source')
@click.option('--show-token', is_flag=True, help='Include the token in --json output')
@click.pass_context
def install_cmd(ctx, install_dir, port, assume_yes, no_overwrite, settle_seconds,
                skip_http_check, allow_weak_token, show_token):
    """Check Docker, write docker-compose.yml and start the gateway."""
    options = ProvisionOptions(
        install_dir=install_dir,
        port=port,
        assume_yes=assume_yes,
        overwrite=not no_overwrite,
        allow_weak_token=allow_weak_token,
        settle_seconds=settle_seconds,
        probe_http=not skip_http_check,
    )

    # Non-interactive runs never block on input
    prompt = (lambda message, default: default) if assume_yes else _prompt

    try:
        result = run_provisioning(options, prompt=prompt, confirm=_confirm)
    except ProvisionError as e:
        _fail(e)
    except KeyboardInterrupt:
        click.echo("\nInstallation cancelled by user", err=True)
        sys.exit(130)

    if ctx.obj.get('json'):
        _json_output(_result_dict(result, show_token))
    else:
        _print_summary(result)


@main.command()
@click.option('--dir', 'install_dir', help='Install directory')
@click.pass_context
def status(ctx, install_dir):
    """Show the state of an installed gateway."""
    path = _install_dir(install_dir)
    try:
        handle = check_environment(require_admin=False)
    except ProvisionError as e:
        _fail(e)

    if not (path / MANIFEST_FILENAME).exists():
        _fail(ProvisionError(f"No installation found in {path}", hint="Run 'clawup install' first."))

    info = ComposeRunner(handle, path).ps()
    if ctx.obj.get('json'):
        _json_output({
            'install_dir': str(path),
            'service': info.service,
            'state': info.state.value,
            'health': info.health.value,
            'container': info.container,
        })
    else:
        _human_output(f"Service:   {info.service}")
        _human_output(f"State:     {info.state.value}")
        _human_output(f"Health:    {info.health.value}")
        if info.container:
            _human_output(f"Container: {info.container}")
    sys.exit(0 if info.ok else 1)


@main.command()
@click.option('--dir', 'install_dir', help='Install directory')
@click.option('-f', '--follow', is_flag=True, help='Follow log output')
def logs(install_dir, follow):
    """Show the gateway container logs."""
    try:
        handle = check_environment(require_admin=False)
    except ProvisionError as e:
        _fail(e)
    result = ComposeRunner(handle, _install_dir(install_dir)).logs(follow=follow)
    sys.exit(result.returncode)


@main.command()
@click.option('--dir', 'install_dir', help='Install directory')
def down(install_dir):
    """Stop and remove the gateway container. Data directories are kept."""
    try:
        handle = check_environment(require_admin=False)
    except ProvisionError as e:
        _fail(e)
    result = ComposeRunner(handle, _install_dir(install_dir)).down()
    sys.exit(result.returncode)


if __name__ == '__main__':
    main()
