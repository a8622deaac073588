from __future__ import annotations

import shlex
from typing import Sequence

TOPLEVEL = '"$(git rev-parse --show-toplevel)"'


def git(args: Sequence[str]) -> str:
    return " ".join(["git", *(shlex.quote(arg) for arg in args)])


def chain(commands: Sequence[str]) -> str:
    return " && ".join(commands)


def at_toplevel(command: str) -> str:
    return f"(cd {TOPLEVEL} && {command})"


def fetch_command(url: str, remote_branch: str, local_branch: str) -> str:
    return git(["fetch", "-f", url, f"{remote_branch}:{local_branch}"])


def dup_branch_command(source: str, destination: str) -> str:
    drop = f"{{ {git(['branch', '-D', destination])} 2>/dev/null || true; }}"
    return chain([drop, git(["branch", "-f", destination, source])])


def subdirectory_filter_command(branch: str, directory: str) -> str:
    return at_toplevel(
        git(["filter-branch", "-f", "--subdirectory-filter", directory, branch])
    )


def relocate_tree_filter(directory: str, staging: str) -> str:
    stage = shlex.quote(f".{staging}")
    target = shlex.quote(directory)
    return chain(
        [
            f"mkdir {stage}",
            f"mv * {stage}/",
            f"mkdir -p {target}",
            f"mv {stage}/* {target}/",
            f"rm -r {stage}",
        ]
    )


def tree_filter_command(branch: str, directory: str, staging: str) -> str:
    tree_filter = relocate_tree_filter(directory, staging)
    return at_toplevel(git(["filter-branch", "-f", "--tree-filter", tree_filter, branch]))


def merge_layer_command(bottom: str, top: str) -> str:
    return chain(
        [
            git(["checkout", top]),
            git(["merge", "--no-edit", "-X", "ours", bottom]),
            git(["checkout", bottom]),
            git(["merge", "--no-edit", top]),
        ]
    )
