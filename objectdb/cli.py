"""
CLI interface for objectdb
Entry point for all objectdb commands
"""

import logging
from pathlib import Path

import click

from objectdb.constants import (
    AUTHOR_EMAIL_ENV,
    AUTHOR_NAME_ENV,
    DEFAULT_AUTHOR_EMAIL,
    DEFAULT_AUTHOR_NAME,
    TREE_TYPE,
)
from objectdb.objects import Identity
from objectdb.repo import Repository


def dir_option(f):
    return click.option(
        "--dir",
        default=".",
        help="Repository directory (default: current directory)",
    )(f)


def fail(message):
    click.echo(click.style("✗ ", fg="red") + message, err=True)
    raise SystemExit(1)


def open_repo(dir, **kwargs) -> Repository:
    repo = Repository(work_dir=dir, **kwargs)
    if not repo.is_initialized():
        fail("Not an objectdb repository")
    return repo


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log every object operation")
def cli(verbose):
    """objectdb - a git-compatible content-addressable object store"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


@cli.command(name="init")
@dir_option
def cmd_init(dir):
    """Create an empty object database"""
    result = Repository(work_dir=dir).initialize()

    if result["success"]:
        click.echo(click.style("✓ ", fg="green") + result["message"])
    else:
        fail(result["message"])


@cli.command(name="hash-object")
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("-w", "write", is_flag=True, help="Also write the blob into the object database")
@dir_option
def cmd_hash_object(file, write, dir):
    """Print the blob digest of FILE (relative paths start at --dir)"""
    repo = open_repo(dir) if write else Repository(work_dir=dir)
    path = Path(file)
    if not path.is_absolute():
        path = repo.work_dir / path
    result = repo.hash_file(path, write=write)

    if result["success"]:
        click.echo(result["blob"].digest)
    else:
        fail(result["message"])


@cli.command(name="cat-file")
@click.argument("sha")
@click.option("-p", "mode", flag_value="pretty", help="Pretty-print the object (default)")
@click.option("-t", "mode", flag_value="type", help="Show the object type")
@click.option("-s", "mode", flag_value="size", help="Show the object size")
@click.option("-e", "mode", flag_value="exists", help="Exit with status 0 if the object is stored, 1 otherwise")
@dir_option
def cmd_cat_file(sha, mode, dir):
    """Show the content, type or size of a stored object"""
    repo = open_repo(dir)
    if mode == "exists":
        result = repo.has_object(sha)
        if not result["success"]:
            fail(result["message"])
        raise SystemExit(0 if result["exists"] else 1)

    result = repo.read_object(sha)
    if not result["success"]:
        fail(result["message"])

    if mode == "type":
        click.echo(result["type"])
    elif mode == "size":
        click.echo(result["size"])
    elif result["type"] == TREE_TYPE:
        _print_tree(repo, sha)
    else:
        click.echo(result["payload"], nl=False)


@cli.command(name="ls-tree")
@click.argument("sha")
@click.option("--name-only", is_flag=True, help="List only entry names")
@dir_option
def cmd_ls_tree(sha, name_only, dir):
    """List the entries of a stored tree"""
    _print_tree(open_repo(dir), sha, name_only=name_only)


def _print_tree(repo, sha, name_only=False):
    result = repo.get_tree(sha)
    if not result["success"]:
        fail(result["message"])

    for entry in result["tree"]:
        if name_only:
            click.echo(entry.path)
        else:
            click.echo(f"{entry.mode.rjust(6, '0')} {entry.kind} {entry.sha}\t{entry.path}")


@cli.command(name="write-tree")
@dir_option
def cmd_write_tree(dir):
    """Store the working directory as a tree and print its digest"""
    result = open_repo(dir).write_tree()

    if result["success"]:
        click.echo(result["sha"])
    else:
        fail(result["message"])


@cli.command(name="commit-tree")
@click.argument("tree")
@click.option("-p", "--parent", default=None, help="Parent commit digest")
@click.option("-m", "--message", required=True, help="Commit message")
@click.option("--author-name", envvar=AUTHOR_NAME_ENV, default=DEFAULT_AUTHOR_NAME, show_default=True)
@click.option("--author-email", envvar=AUTHOR_EMAIL_ENV, default=DEFAULT_AUTHOR_EMAIL, show_default=True)
@dir_option
def cmd_commit_tree(tree, parent, message, author_name, author_email, dir):
    """Store a commit of TREE and print its digest"""
    try:
        identity = Identity(name=author_name, email=author_email)
    except ValueError as e:
        fail(str(e))

    result = open_repo(dir, identity=identity).commit_tree(tree, parent, message)

    if result["success"]:
        click.echo(result["sha"])
    else:
        fail(result["message"])


def main():
    """Main entry point for objectdb CLI"""
    cli()


if __name__ == "__main__":
    main()
