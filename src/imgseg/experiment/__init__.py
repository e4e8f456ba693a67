from .io import load_image, render_segment_borders, write_results
from .loader import load_config, load_run_spec

__all__ = [
    "load_image",
    "render_segment_borders",
    "write_results",
    "load_config",
    "load_run_spec",
]
