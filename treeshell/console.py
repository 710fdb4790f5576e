# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""Global console instance for Treeshell applications."""
from rich.console import Console

from treeshell.themes import get_one_theme

console = Console(color_system="truecolor", theme=get_one_theme())
