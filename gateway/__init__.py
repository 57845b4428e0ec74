"""Configuration-driven HTTP/HTTPS front-end: reverse proxy, static files and https redirects."""
