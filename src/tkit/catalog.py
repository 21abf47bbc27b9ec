"""
Example tool definitions.

Shown by ``tkit examples`` and offered by the ``tkit init`` wizard.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import Tool


@dataclass(frozen=True)
class ExampleTool:
    """A ready-made tool definition, grouped for display."""

    name: str
    description: str
    category: str
    install: tuple[str, ...]
    run: tuple[str, ...] = ()
    remove: tuple[str, ...] = ()
    update: tuple[str, ...] = ()
    starter: bool = False

    def to_tool(self) -> Tool:
        """Materialize as a registry entry.

        Missing remove/update sequences fall back to apt-get.
        """
        return Tool(
            name=self.name,
            description=self.description,
            install_commands=list(self.install),
            remove_commands=list(self.remove) or [f"sudo apt-get remove -y {self.name}"],
            update_commands=list(self.update) or [
                "sudo apt-get update",
                f"sudo apt-get upgrade -y {self.name}",
            ],
            run_commands=list(self.run),
        )


EXAMPLES: tuple[ExampleTool, ...] = (
    ExampleTool(
        name="git",
        description="Version control system",
        category="Development Tools",
        install=("sudo apt-get update", "sudo apt-get install -y git"),
        run=("git --version",),
        starter=True,
    ),
    ExampleTool(
        name="docker",
        description="Container platform",
        category="Development Tools",
        install=(
            "curl -fsSL https://get.docker.com -o get-docker.sh",
            "sudo sh get-docker.sh",
        ),
        run=("docker --version",),
        remove=("sudo apt-get remove -y docker docker-engine docker.io containerd runc",),
        update=("sudo apt-get update", "sudo apt-get upgrade -y docker-ce"),
        starter=True,
    ),
    ExampleTool(
        name="vscode",
        description="Visual Studio Code editor",
        category="Development Tools",
        install=("sudo snap install code --classic",),
        run=("code",),
        remove=("sudo snap remove code",),
        update=("sudo snap refresh code",),
    ),
    ExampleTool(
        name="node",
        description="Node.js runtime",
        category="Programming Languages",
        install=(
            "curl -fsSL https://deb.nodesource.com/setup_lts.x | sudo -E bash -",
            "sudo apt-get install -y nodejs",
        ),
        run=("node --version", "npm --version"),
        remove=("sudo apt-get remove -y nodejs",),
        update=("sudo apt-get update", "sudo apt-get upgrade -y nodejs"),
        starter=True,
    ),
    ExampleTool(
        name="python",
        description="Python programming language",
        category="Programming Languages",
        install=("sudo apt-get update", "sudo apt-get install -y python3 python3-pip"),
        run=("python3 --version",),
        remove=("sudo apt-get remove -y python3-pip",),
        update=("sudo apt-get update", "sudo apt-get upgrade -y python3"),
        starter=True,
    ),
    ExampleTool(
        name="rust",
        description="Rust programming language",
        category="Programming Languages",
        install=("curl --proto '=https' --tlsv1.2 -sSf https://sh.rustup.rs | sh -s -- -y",),
        run=("rustc --version",),
        remove=("rustup self uninstall -y",),
        update=("rustup update",),
    ),
    ExampleTool(
        name="golang",
        description="Go programming language",
        category="Programming Languages",
        install=(
            "wget https://go.dev/dl/go1.21.0.linux-amd64.tar.gz",
            "sudo tar -C /usr/local -xzf go1.21.0.linux-amd64.tar.gz",
        ),
        run=("go version",),
        remove=("sudo rm -rf /usr/local/go",),
        update=("echo 'Download the latest release from https://go.dev/dl/'",),
    ),
)


def starter_tools() -> list[ExampleTool]:
    """The examples the init wizard offers by default."""
    return [example for example in EXAMPLES if example.starter]


def by_category() -> dict[str, list[ExampleTool]]:
    groups: dict[str, list[ExampleTool]] = {}
    for example in EXAMPLES:
        groups.setdefault(example.category, []).append(example)
    return groups
