# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
A small One Dark inspired palette used by the help and error output.

`OneColors` values are plain hex strings so they can be dropped into Rich
markup (`f"[{OneColors.DARK_RED}]..."`). `get_one_theme()` exposes the same
palette as named Rich styles.
"""
from rich.style import Style
from rich.theme import Theme


class OneColors:
    BLACK = "#282C34"
    WHITE = "#ABB2BF"
    COMMENT_GREY = "#5C6370"
    DARK_RED = "#BE5046"
    GREEN = "#98C379"
    LIGHT_YELLOW = "#E5C07B"
    BLUE = "#61AFEF"
    MAGENTA = "#C678DD"
    CYAN = "#56B6C2"

    @classmethod
    def as_dict(cls) -> dict[str, str]:
        return {
            name.lower(): value
            for name, value in vars(cls).items()
            if name.isupper() and isinstance(value, str)
        }


def get_one_theme() -> Theme:
    """Return a Rich theme with one style per palette entry plus semantic aliases."""
    styles = {name: Style(color=value) for name, value in OneColors.as_dict().items()}
    styles.update(
        {
            "command": Style(color=OneColors.CYAN, bold=True),
            "flag": Style(color=OneColors.LIGHT_YELLOW),
            "error": Style(color=OneColors.DARK_RED, bold=True),
            "hint": Style(color=OneColors.COMMENT_GREY),
        }
    )
    return Theme(styles)
