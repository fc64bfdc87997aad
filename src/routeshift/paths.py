"""Route path calculation from a route module's file location.

Flat-route file names map to URL patterns::

    app/routes/index.tsx            → /
    app/routes/_index.tsx           → /
    app/routes/posts._index.tsx     → /posts/
    app/routes/posts.$postId.tsx    → /posts/:postId
    app/routes/files.$.tsx          → /files/:*

The steps run in a fixed order; later steps rely on the normalization
done by earlier ones.
"""

import re

from routeshift.config import DEFAULT_CONFIG

_EXTENSION_RE = re.compile(r"\.(tsx|ts|jsx|js)$")


def compute_route_path(file_path: str, *, routes_root: str = DEFAULT_CONFIG.routes_root) -> str:
    """Compute the canonical route path for a route module.

    Args:
        file_path: Path of the module, absolute or relative.  Windows
            separators are accepted.
        routes_root: Name of the directory segment that roots the route
            tree.  Everything up to and including its last occurrence is
            discarded; without it the path is taken as already relative.

    Returns:
        A route path such as ``/posts/:postId``.  Never empty.
    """
    path = file_path.replace("\\", "/")
    if path.startswith("./"):
        path = path[2:]

    root_re = re.compile(r"^(?:.*/)?" + re.escape(routes_root) + r"(?=/|$)")
    path = root_re.sub("", path, count=1)

    path = _EXTENSION_RE.sub("", path)

    # Flat-route dot delimiters are path separators
    path = path.replace(".", "/")

    if path == "index" or path.endswith("/index"):
        path = path[: -len("index")]

    if path.startswith("_"):
        path = "/" + path

    if path.endswith("/_index"):
        path = path[: -len("_index")]

    path = "/".join(_param_segment(segment) for segment in path.split("/"))

    return path or "/"


def _param_segment(segment: str) -> str:
    if not segment.startswith("$"):
        return segment
    name = segment[1:]
    return ":" + (name or "*")
