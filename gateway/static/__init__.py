from .serve import StaticMount, relative_static_path, resolve_static_file, serve_static

__all__ = ["StaticMount", "relative_static_path", "resolve_static_file", "serve_static"]
