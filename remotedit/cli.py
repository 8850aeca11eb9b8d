"""CLI interface for remotedit."""

import logging
import time
from pathlib import Path
from typing import Any, Optional

import click
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.tree import Tree

from .credentials import CredentialStore, SyncCredentials
from .exceptions import RemoteEditError
from .explorer import ALWAYS_COLLAPSED
from .output import OutputFormatter
from .rclone import resolve_tool_path
from .tree import TreeNode, build_tree
from .workspace import WorkspaceController

logger = logging.getLogger(__name__)


def _build_rich_tree(node: TreeNode, branch: Optional[Tree] = None) -> Tree:
    """Render a snapshot as a rich Tree, leaving always-collapsed folders shut."""
    label = f"[bold blue]{node.name}/[/bold blue]" if node.is_folder else node.name
    current = Tree(label) if branch is None else branch.add(label)
    if node.is_folder and (branch is None or node.name not in ALWAYS_COLLAPSED):
        for child in node.children:
            _build_rich_tree(child, current)
    return current


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="remotedit")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """remotedit - Edit locally, mirror to a server with rclone and run remotely."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("remotedit").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option("--host", prompt="Server IP or hostname", help="Remote server address")
@click.option("--user", prompt="Server user", help="Remote login user")
@click.option(
    "--password",
    prompt="Server password (empty for key login)",
    default="",
    hide_input=True,
    help="Remote login password",
)
@click.option(
    "--rclone-path",
    prompt="rclone path (command, executable or folder)",
    default="rclone",
    help="Location of the rclone executable",
)
@click.option(
    "--interval",
    prompt="Auto-sync interval in seconds (0 disables)",
    type=int,
    default=60,
    help="Auto-sync interval in seconds",
)
@click.pass_context
def init(
    ctx: Any,
    host: str,
    user: str,
    password: str,
    rclone_path: str,
    interval: int,
) -> None:
    """Save server settings and create the rclone profile.

    Stores the settings in ~/.config/remotedit/server_settings.json.
    """
    out: OutputFormatter = ctx.obj["out"]

    if interval < 0:
        out.error("Interval cannot be negative")
        ctx.exit(1)

    credentials = SyncCredentials(
        host=host.strip(),
        user=user.strip(),
        secret=password,
        sync_tool_path=rclone_path.strip(),
        interval_seconds=interval,
    )

    try:
        store = CredentialStore()
        provisioned = store.save(credentials)
    except OSError as e:
        out.error(f"Could not save settings: {e}")
        ctx.exit(1)
        return

    if not provisioned:
        out.warning(
            "Settings saved, but the rclone profile could not be created. "
            "The next sync will show the details."
        )

    out.print_summary(
        "Settings Saved",
        [
            ("Status", "✓ Configuration saved successfully"),
            ("Config file", str(store.settings_path)),
            ("rclone", resolve_tool_path(credentials.sync_tool_path)),
            ("rclone profile", "created" if provisioned else "not created"),
        ],
    )


@main.command()
@click.pass_context
def status(ctx: Any) -> None:
    """Show the current server settings."""
    out: OutputFormatter = ctx.obj["out"]
    store = CredentialStore()
    credentials = store.load()

    if out.json_output:
        data = credentials.to_dict()
        data["pass"] = "***" if credentials.secret else ""
        out.output_json(data)
        return

    out.print_summary(
        "Server Settings",
        [
            ("Host", credentials.host or "(not set)"),
            ("User", credentials.user or "(not set)"),
            ("Password", "***" if credentials.secret else "(not set)"),
            ("rclone", resolve_tool_path(credentials.sync_tool_path)),
            (
                "Auto-sync",
                f"every {credentials.interval_seconds}s"
                if credentials.interval_seconds > 0
                else "disabled",
            ),
            ("Config file", str(store.settings_path)),
        ],
    )
    if not credentials.is_complete:
        out.warning("Server settings incomplete. Run 'remotedit init' first.")


@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.pass_context
def tree(ctx: Any, path: str) -> None:
    """Show the file tree of a workspace folder."""
    out: OutputFormatter = ctx.obj["out"]
    root = build_tree(str(Path(path).resolve()))
    if root is None:
        out.error(f"Not a readable directory: {path}")
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(root.to_dict())
        return
    out.console.print(_build_rich_tree(root))


def _make_controller(out: OutputFormatter) -> WorkspaceController:
    controller = WorkspaceController(CredentialStore())
    if not out.json_output:
        controller.log.subscribe(out.info)
    return controller


@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--no-progress", is_flag=True, help="Disable the progress spinner")
@click.pass_context
def sync(ctx: Any, path: str, no_progress: bool) -> None:
    """Mirror a workspace folder to the server once.

    PATH: Local workspace folder (default: current directory)
    """
    out: OutputFormatter = ctx.obj["out"]
    controller = _make_controller(out)
    try:
        controller.open(path, sync=False, watch=False)
        if no_progress or out.quiet or out.json_output:
            outcome = controller.sync(wait=True)
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                TimeElapsedColumn(),
                transient=True,
            ) as progress:
                progress.add_task("Syncing...", total=None)
                outcome = controller.sync(wait=True)
    except RemoteEditError as e:
        out.error(str(e))
        ctx.exit(1)
        return
    finally:
        controller.close()

    if out.json_output:
        out.output_json(outcome.to_dict())
    if not outcome.ok:
        if not out.json_output:
            out.error(outcome.message)
        ctx.exit(1)
    out.success("✓ Sync complete")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--workspace",
    "-w",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Workspace folder (default: the file's folder)",
)
@click.pass_context
def run(ctx: Any, file: str, workspace: Optional[str]) -> None:
    """Sync the workspace and run FILE on the server."""
    out: OutputFormatter = ctx.obj["out"]
    file_path = Path(file).resolve()
    root = Path(workspace).resolve() if workspace else file_path.parent

    if root not in file_path.parents:
        out.error(f"{file} is not inside workspace {root}")
        ctx.exit(1)

    controller = _make_controller(out)
    try:
        controller.open(str(root), sync=False, watch=False)
        result = controller.run(str(file_path))
    except (RemoteEditError, OSError) as e:
        out.error(str(e))
        ctx.exit(1)
        return
    finally:
        controller.close()

    if out.json_output:
        out.output_json(result.to_dict())
    else:
        if result.stdout:
            out.console.print(result.stdout, markup=False, end="")
        if result.stderr:
            out.err_console.print(result.stderr, markup=False, end="")
        if result.no_response:
            out.error(result.message or "No response from server")
        elif result.message:
            out.error(result.message)

    if not result.success:
        ctx.exit(result.exit_code if result.exit_code else 1)


@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.pass_context
def watch(ctx: Any, path: str) -> None:
    """Open a workspace, watch it for changes and auto-sync until Ctrl+C."""
    out: OutputFormatter = ctx.obj["out"]
    controller = _make_controller(out)
    controller.watcher.subscribe(
        lambda snapshot: out.info(f"Workspace changed: {snapshot.path}")
    )
    try:
        controller.open(path)
        interval = controller.state.credentials.interval_seconds
        if interval <= 0:
            out.warning("Auto-sync is disabled; only file changes are reported")
        out.info("Watching for changes. Press Ctrl+C to stop.")
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        out.warning("\nStopped watching")
    except RemoteEditError as e:
        out.error(str(e))
        ctx.exit(1)
    finally:
        controller.close()


if __name__ == "__main__":
    main()
