"""URL shortener service: random short codes with cache-aside redirects."""
