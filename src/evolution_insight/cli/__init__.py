"""CLI entry point. Importing the command modules registers them on ``app``."""

import typer

app = typer.Typer(
    name="evolution-insight",
    help="Evolution Insight - Code Evolution Analytics",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .analyze import main as _main_callback  # noqa: F401, E402
from .burnout import burnout as _burnout  # noqa: F401, E402
from .complexity import complexity as _complexity  # noqa: F401, E402
from .ownership import ownership as _ownership  # noqa: F401, E402
from .risk import risk as _risk  # noqa: F401, E402


def main() -> None:
    app()
