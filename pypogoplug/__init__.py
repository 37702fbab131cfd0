from .native import PogoplugClient
from .render import file_size, render_demo_page

__all__ = ["PogoplugClient", "file_size", "render_demo_page"]
