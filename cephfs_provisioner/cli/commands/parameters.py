"""
StorageClass parameter commands.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

import typer
from oslo_config import cfg

from cephfs_provisioner.provisioner.configuration import load_config
from cephfs_provisioner.provisioner.credentials import resolve_admin_secret
from cephfs_provisioner.provisioner.exceptions import ProvisionValidationError
from cephfs_provisioner.provisioner.kube import KubeClient
from cephfs_provisioner.provisioner.parameters import resolve_parameters

app = typer.Typer(help="StorageClass parameter commands")


def load_parameters(options: Optional[List[str]], file: Optional[Path]) -> Dict[str, str]:
    """
    Collect parameters from a JSON file and KEY=VALUE arguments.

    The file may hold either a plain mapping or a StorageClass object, in
    which case its ``parameters`` are used. Arguments override the file.
    """
    params: Dict[str, str] = {}
    if file is not None:
        data = json.loads(file.read_text(encoding="utf-8"))
        if isinstance(data, dict) and data.get("kind") == "StorageClass":
            data = data.get("parameters") or {}
        if not isinstance(data, dict):
            raise ValueError(f"{file} does not contain a parameter mapping")
        params.update({str(k): str(v) for k, v in data.items()})

    for option in options or []:
        if "=" not in option:
            raise ValueError(f"Invalid parameter {option!r}, expected KEY=VALUE")
        key, value = option.split("=", 1)
        params[key] = value
    return params


@app.command()
def validate(
    options: Optional[List[str]] = typer.Argument(None, help="Parameters as KEY=VALUE"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="JSON parameters or StorageClass file"),
):
    """
    Validate StorageClass parameters.

    Prints the resolved cluster connection without contacting Kubernetes.
    """
    try:
        resolved = resolve_parameters(load_parameters(options, file))
    except ProvisionValidationError as e:
        typer.echo(f"Invalid parameters: {e}", err=True)
        raise typer.Exit(1)
    except Exception as e:
        typer.echo(f"Error reading parameters: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"cluster: {resolved.cluster}")
    typer.echo(f"adminId: {resolved.admin_id}")
    typer.echo(f"monitors: {','.join(resolved.monitors)}")
    typer.echo(f"adminSecret: {resolved.secret_ref.namespace}/{resolved.secret_ref.name}")


@app.command("check-secret")
def check_secret(
    options: Optional[List[str]] = typer.Argument(None, help="Parameters as KEY=VALUE"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="JSON parameters or StorageClass file"),
    config_file: Optional[List[str]] = typer.Option(None, "--config-file", help="oslo.config file"),
):
    """
    Check that the admin secret named by the parameters is usable.

    The secret value is never printed.
    """
    try:
        resolved = resolve_parameters(load_parameters(options, file))
        group = load_config(cfg.ConfigOpts(), config_file or [])
        kube = KubeClient.from_config(group)
        resolve_admin_secret(kube, resolved.secret_ref)
    except Exception as e:
        typer.echo(f"Error checking admin secret: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Admin secret found in {resolved.secret_ref.namespace}/{resolved.secret_ref.name}")
